"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from ``switchboard.base.errors`` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .taxonomy import (
    AggregateFailure,
    ConfigurationError,
    NoBackendAvailableError,
    TransientBackendError,
    UnknownBackendError,
    UnsupportedOperationError,
)
from .classification import classify_exception, is_retryable, normalize_error

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "TransientBackendError",
    "AggregateFailure",
    "NoBackendAvailableError",
    "classify_exception",
    "is_retryable",
    "normalize_error",
]
