"""
Structured backend error exception type.

Wraps backend-specific exceptions with a normalized ``ErrorCode`` so retry
decisions, fallback routing and structured logging can treat every vendor
the same way.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Represents a structured backend error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Backend kind where the error originated (e.g., ``"openai"``).
        model: Optional model name associated with the failure.
        status_code: HTTP-like status when the failure came from a response.
        retryable: Hint for the retry wrapper; status codes take precedence.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    status_code: Optional[int] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
