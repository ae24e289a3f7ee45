"""Bounded exponential-backoff retry for coroutine calls.

Policy
------
- Up to ``max_attempts`` calls for one logical operation, strictly sequential.
- Between attempts the wrapper sleeps ``base_delay * 2**attempt_index``
  (attempt_index starting at 0), suspending only the calling task.
- Only failures the ``classifier`` deems retryable are re-issued; any other
  failure propagates immediately.
- On exhaustion the last exception is re-raised unchanged (same object, same
  traceback chain).

``asyncio.CancelledError`` is never caught.
"""
from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional, Protocol, TypeVar

from ..errors import is_retryable

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: BaseException | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay_ms: int = 1000
    classifier: Callable[[BaseException], bool] = is_retryable
    attempt_logger: Optional[AttemptLogger] = None
    sleep: Optional[Callable[[float], Awaitable[None]]] = None

    def delays(self) -> Iterable[float]:
        """Yield the backoff (seconds) after each non-final attempt."""
        base = self.base_delay_ms / 1000.0
        for attempt in range(self.max_attempts - 1):
            yield base * 2**attempt


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(fn: Callable[[], Awaitable[T]], config: RetryConfig = DEFAULT_RETRY_CONFIG) -> T:
    """Await ``fn()`` under ``config``; see module docstring for the policy."""
    delays: List[float] = list(config.delays())
    sleep = config.sleep or asyncio.sleep
    attempts = max(1, config.max_attempts)
    for index in range(attempts):
        try:
            result = await fn()
        except Exception as exc:
            final = index == attempts - 1 or not config.classifier(exc)
            delay = None if final else delays[index]
            if config.attempt_logger:
                config.attempt_logger(attempt=index + 1, max_attempts=attempts, delay=delay, error=exc)
            if final:
                raise
            await sleep(delay)
            continue
        if config.attempt_logger:
            config.attempt_logger(attempt=index + 1, max_attempts=attempts, delay=None, error=None)
        return result
    raise RuntimeError("retry_async: loop exited without result")  # pragma: no cover


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Decorator form of :func:`retry_async` for coroutine functions."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await retry_async(lambda: func(*args, **kwargs), config)

        return wrapper

    return decorator


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry_async",
    "retry",
]
