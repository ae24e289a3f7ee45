"""Unified backend error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``switchboard.base.errors_parts`` so callers have a single stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.taxonomy import (
    AggregateFailure,
    ConfigurationError,
    NoBackendAvailableError,
    TransientBackendError,
    UnknownBackendError,
    UnsupportedOperationError,
)
from .errors_parts.classification import classify_exception, is_retryable, normalize_error

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
