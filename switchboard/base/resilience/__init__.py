"""Resilience helpers (retry policy)."""

from .retry import DEFAULT_RETRY_CONFIG, AttemptLogger, RetryConfig, retry, retry_async

__all__ = ["AttemptLogger", "RetryConfig", "DEFAULT_RETRY_CONFIG", "retry", "retry_async"]
