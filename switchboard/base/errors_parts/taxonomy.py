"""
Named failure types raised by adapters, the factory and the manager.

Every type is a :class:`ProviderError` with a fixed :class:`ErrorCode`, so
callers can either catch the specific class or branch on ``exc.code``.

Failure semantics
-----------------
- ``ConfigurationError``: required credential or setting missing. Fatal.
- ``UnknownBackendError``: factory asked for an unmapped backend kind. Fatal.
- ``UnsupportedOperationError``: the capability is absent on this backend.
  Fatal for the adapter, but the manager continues down its fallback chain.
- ``TransientBackendError``: 5xx / 429 / connection reset. Retried within one
  adapter's budget.
- ``AggregateFailure``: every candidate of a fallback walk failed.
- ``NoBackendAvailableError``: dispatch could not resolve any adapter.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from .error_code import ErrorCode
from .provider_error import ProviderError


def _message_of(exc: BaseException) -> str:
    if isinstance(exc, ProviderError):
        return exc.message
    return str(exc) or type(exc).__name__


class ConfigurationError(ProviderError):
    """Required credential or setting is missing or invalid."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: Optional[str] = None,
        raw: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONFIGURATION,
            message=message,
            provider=provider,
            model=model,
            raw=raw,
        )


class UnknownBackendError(ProviderError):
    """The factory cannot resolve or construct the requested backend kind."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        raw: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_BACKEND,
            message=message,
            provider=provider,
            raw=raw,
        )


class UnsupportedOperationError(ProviderError):
    """The backend has no implementation of the requested capability."""

    def __init__(
        self,
        operation: str,
        provider: str = "unknown",
        model: Optional[str] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNSUPPORTED,
            message=f"{operation} is not supported by {provider}",
            provider=provider,
            model=model,
        )
        self.operation = operation


class TransientBackendError(ProviderError):
    """Retryable failure (server error, rate limit, connection reset)."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        raw: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TRANSIENT,
            message=message,
            provider=provider,
            model=model,
            status_code=status_code,
            retryable=True,
            raw=raw,
        )


class AggregateFailure(ProviderError):
    """Every backend in a fallback walk failed.

    ``errors`` keeps the underlying exceptions in the order they were raised;
    ``messages`` mirrors them as plain strings for logs and user display.
    """

    def __init__(self, errors: Sequence[BaseException], provider: str = "manager") -> None:
        self.errors: List[BaseException] = list(errors)
        self.messages: List[str] = [_message_of(e) for e in self.errors]
        super().__init__(
            code=ErrorCode.AGGREGATE,
            message=f"All backends failed. Errors: {'; '.join(self.messages)}",
            provider=provider,
            raw=self.errors[-1] if self.errors else None,
        )


class NoBackendAvailableError(ProviderError):
    """Dispatch found neither an explicit backend nor a primary."""

    def __init__(self, provider: str = "manager", message: str = "No backend available") -> None:
        super().__init__(
            code=ErrorCode.UNAVAILABLE,
            message=message,
            provider=provider,
        )


__all__ = [
    "ConfigurationError",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "TransientBackendError",
    "AggregateFailure",
    "NoBackendAvailableError",
]
