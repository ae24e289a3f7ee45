"""
Error classification helpers.

Maps raised exceptions to normalized :class:`ErrorCode` values and decides
whether a failure is worth another attempt. Both decisions are pure
functions of the exception object: status code first, then reset-connection
markers, then message heuristics as a last resort for SDKs that expose
nothing structured.

Retry rule
----------
An error is retryable iff its status is >= 500, equals 429, or it signals a
reset connection. Everything else is fatal and propagates immediately.
"""
from __future__ import annotations

import asyncio
import errno
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError

_RESET_CODES = frozenset({"ECONNRESET", "ECONNABORTED", "EPIPE"})


def _coerce_status(value: object) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool) and 100 <= value < 600:
        return value
    return None


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from a backend exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    - ``exc.response.status``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = _coerce_status(getattr(exc, attr, None))
        if val is not None:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        for attr in ("status_code", "status"):
            val = _coerce_status(getattr(resp, attr, None))
            if val is not None:
                return val
    return None


def _is_connection_reset(exc: BaseException) -> bool:
    """Return True when the exception (or its direct cause) signals a dropped connection.

    SDKs such as ``openai`` wrap the transport error, so ``__cause__`` is
    inspected one level deep.
    """
    for candidate in (exc, exc.__cause__):
        if candidate is None:
            continue
        if isinstance(candidate, ConnectionResetError):
            return True
        if isinstance(candidate, (httpx.RemoteProtocolError, httpx.ConnectError, httpx.ReadError)):
            return True
        code = getattr(candidate, "code", None)
        if isinstance(code, str) and code.upper() in _RESET_CODES:
            return True
        if getattr(candidate, "errno", None) == errno.ECONNRESET:
            return True
    return False


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


_PATTERN_GROUPS = (
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH, ("unauthorized", "forbidden", "api key", "auth")),
    (ErrorCode.UNSUPPORTED, ("unsupported", "not supported")),
    (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
    (ErrorCode.CONFLICT, ("conflict", "already exists")),
    (ErrorCode.UNAVAILABLE, ("unavailable", "temporarily down")),
    (ErrorCode.VALIDATION, ("validation", "invalid", "malformed")),
    (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
)


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status code."""
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in _PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Cancellation and timeout exceptions.
        3. HTTP status mapping (unmapped 5xx collapse to ``SERVER_ERROR``).
        4. Reset-connection markers (``TRANSIENT``).
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None:
        if status in _HTTP_STATUS_MAP:
            return _HTTP_STATUS_MAP[status]
        if status >= 500:
            return ErrorCode.SERVER_ERROR
    if _is_connection_reset(exc):
        return ErrorCode.TRANSIENT
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def is_retryable(exc: BaseException) -> bool:
    """Return True when another attempt against the same backend may succeed.

    A concrete status code always decides. Without one, a reset connection
    or a ``ProviderError`` flagged ``retryable`` qualifies.
    """
    status = _extract_status(exc)
    if status is not None:
        return status >= 500 or status == 429
    if _is_connection_reset(exc):
        return True
    return isinstance(exc, ProviderError) and exc.retryable


def normalize_error(
    exc: BaseException,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Wrap ``exc`` in a :class:`ProviderError` unless it already is one.

    Used for structured diagnostics; the retry wrapper and the manager keep
    raising the original exception object.
    """
    if isinstance(exc, ProviderError):
        return exc
    return ProviderError(
        code=classify_exception(exc),
        message=str(exc) or type(exc).__name__,
        provider=provider,
        model=model,
        status_code=_extract_status(exc),
        retryable=is_retryable(exc),
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "is_retryable",
    "normalize_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
