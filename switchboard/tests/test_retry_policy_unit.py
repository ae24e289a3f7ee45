from __future__ import annotations

from typing import List

import pytest

from switchboard.base.resilience.retry import RetryConfig, retry, retry_async


class _StatusError(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"status {status}")
        self.status_code = status


class _Flaky:
    """Coroutine callable failing ``fail_times`` times with ``status``."""

    def __init__(self, fail_times: int, status: int = 503) -> None:
        self.fail_times = fail_times
        self.status = status
        self.calls = 0
        self.raised: List[BaseException] = []

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.fail_times:
            err = _StatusError(self.status)
            self.raised.append(err)
            raise err
        return "ok"


def _recording_sleep(delays: List[float]):
    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    return _sleep


def test_delays_double_from_base():
    cfg = RetryConfig(max_attempts=4, base_delay_ms=250)
    assert list(cfg.delays()) == [0.25, 0.5, 1.0]  # nosec B101
    assert list(RetryConfig(max_attempts=1).delays()) == []  # nosec B101


@pytest.mark.asyncio
async def test_transient_failures_are_retried_with_backoff():
    slept: List[float] = []
    fn = _Flaky(fail_times=2)
    result = await retry_async(fn, RetryConfig(max_attempts=3, base_delay_ms=1000, sleep=_recording_sleep(slept)))
    assert result == "ok"  # nosec B101
    assert fn.calls == 3  # nosec B101
    assert slept == [1.0, 2.0]  # nosec B101


@pytest.mark.asyncio
async def test_exhaustion_reraises_last_error_unchanged():
    slept: List[float] = []
    fn = _Flaky(fail_times=10, status=500)
    with pytest.raises(_StatusError) as excinfo:
        await retry_async(fn, RetryConfig(max_attempts=3, base_delay_ms=1000, sleep=_recording_sleep(slept)))
    assert fn.calls == 3  # nosec B101
    assert excinfo.value is fn.raised[-1]  # nosec B101
    assert slept == [1.0, 2.0]  # nosec B101


@pytest.mark.asyncio
async def test_fatal_error_is_not_retried():
    slept: List[float] = []
    fn = _Flaky(fail_times=10, status=400)
    with pytest.raises(_StatusError):
        await retry_async(fn, RetryConfig(max_attempts=5, sleep=_recording_sleep(slept)))
    assert fn.calls == 1  # nosec B101
    assert slept == []  # nosec B101


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "attempts,failures,expected_calls",
    [(3, 0, 1), (3, 1, 2), (3, 5, 3), (1, 2, 1), (4, 3, 4)],
)
async def test_call_count_is_bounded(attempts, failures, expected_calls):
    fn = _Flaky(fail_times=failures, status=429)
    try:
        await retry_async(fn, RetryConfig(max_attempts=attempts, base_delay_ms=0))
    except _StatusError:
        pass
    assert fn.calls == expected_calls  # nosec B101


@pytest.mark.asyncio
async def test_attempt_logger_sees_every_attempt():
    seen = []

    def _log(*, attempt, max_attempts, delay, error):
        seen.append((attempt, max_attempts, delay, error is not None))

    fn = _Flaky(fail_times=1)
    await retry_async(fn, RetryConfig(max_attempts=3, base_delay_ms=10, attempt_logger=_log, sleep=_recording_sleep([])))
    assert seen == [(1, 3, 0.01, True), (2, 3, None, False)]  # nosec B101


@pytest.mark.asyncio
async def test_custom_classifier_controls_retry():
    fn = _Flaky(fail_times=1, status=400)
    result = await retry_async(fn, RetryConfig(max_attempts=2, base_delay_ms=0, classifier=lambda exc: True))
    assert result == "ok"  # nosec B101
    assert fn.calls == 2  # nosec B101


@pytest.mark.asyncio
async def test_decorator_form():
    calls = {"n": 0}

    @retry(RetryConfig(max_attempts=2, base_delay_ms=0))
    async def flaky(value: str) -> str:
        calls["n"] += 1
        if calls["n"] == 1:
            raise ConnectionResetError()
        return value.upper()

    assert await flaky("done") == "DONE"  # nosec B101
    assert calls["n"] == 2  # nosec B101
