from __future__ import annotations

import pytest

from switchboard.base.streaming import TextStream
from switchboard.mock.client import MockBackend, ScriptedFailure


class _Source:
    """Async generator wrapper recording whether it started and was released."""

    def __init__(self, fragments, fail_after=None, failure=None):
        self.fragments = list(fragments)
        self.fail_after = fail_after
        self.failure = failure or RuntimeError("connection dropped")
        self.started = False
        self.released = False

    async def gen(self):
        self.started = True
        try:
            for index, fragment in enumerate(self.fragments):
                if self.fail_after is not None and index >= self.fail_after:
                    raise self.failure
                yield fragment
        finally:
            self.released = True


@pytest.mark.asyncio
async def test_nothing_is_pulled_before_iteration():
    source = _Source(["a"])
    stream = TextStream(source.gen(), provider="mock")
    assert source.started is False  # nosec B101
    await stream.aclose()
    assert stream.closed is True  # nosec B101


@pytest.mark.asyncio
async def test_exhaustion_finishes_and_releases():
    source = _Source(["Hel", "lo"])
    stream = TextStream(source.gen(), provider="mock", model="m")
    assert await stream.collect() == "Hello"  # nosec B101
    assert stream.finished is True  # nosec B101
    assert stream.closed is True  # nosec B101
    assert stream.emitted == 2  # nosec B101
    assert source.released is True  # nosec B101


@pytest.mark.asyncio
async def test_early_close_releases_producer():
    source = _Source(["a", "b", "c"])
    stream = TextStream(source.gen(), provider="mock")
    assert await stream.__anext__() == "a"  # nosec B101
    await stream.aclose()
    assert source.released is True  # nosec B101
    assert stream.finished is False  # nosec B101
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


@pytest.mark.asyncio
async def test_context_manager_closes_on_break():
    source = _Source(["a", "b", "c"])
    async with TextStream(source.gen(), provider="mock") as stream:
        async for chunk in stream:
            if chunk == "b":
                break
    assert source.released is True  # nosec B101
    assert stream.emitted == 2  # nosec B101


@pytest.mark.asyncio
async def test_error_after_fragments_is_raised_to_consumer():
    source = _Source(["a", "b", "c"], fail_after=2)
    stream = TextStream(source.gen(), provider="mock")
    received = []
    with pytest.raises(RuntimeError, match="connection dropped"):
        async for chunk in stream:
            received.append(chunk)
    assert received == ["a", "b"]  # nosec B101
    assert isinstance(stream.error, RuntimeError)  # nosec B101
    assert stream.closed is True  # nosec B101
    assert source.released is True  # nosec B101


@pytest.mark.asyncio
async def test_stream_error_event_uses_classified_code(captured_logger):
    logger, handler = captured_logger
    source = _Source(["a", "b"], fail_after=1, failure=ConnectionResetError("peer reset"))
    stream = TextStream(source.gen(), provider="mock", logger=logger)
    with pytest.raises(ConnectionResetError):
        await stream.collect()
    (event,) = handler.named("stream.error")
    assert event["error_code"] == "transient"  # nosec B101
    assert event["emitted"] is True  # nosec B101
    assert event["fragments"] == 1  # nosec B101


@pytest.mark.asyncio
async def test_aclose_is_idempotent():
    stream = TextStream(_Source(["x"]).gen(), provider="mock")
    await stream.aclose()
    await stream.aclose()
    assert stream.closed is True  # nosec B101


@pytest.mark.asyncio
async def test_adapter_stream_accounts_only_when_exhausted(mock_config, usage_log):
    adapter = MockBackend(mock_config(stream=["one ", "two ", "three"]), usage_recorder=usage_log)

    partial = adapter.generate_stream("count")
    assert await partial.__anext__() == "one "  # nosec B101
    await partial.aclose()
    assert adapter.streams_released == 1  # nosec B101
    assert len(usage_log) == 0  # nosec B101
    assert adapter.get_token_count() == 0  # nosec B101

    full = adapter.generate_stream("count")
    assert await full.collect() == "one two three"  # nosec B101
    assert adapter.streams_released == 2  # nosec B101
    (record,) = usage_log.records()
    assert record.operation == "generate_stream"  # nosec B101
    assert adapter.get_token_count() == record.tokens_used > 0  # nosec B101


@pytest.mark.asyncio
async def test_adapter_stream_is_lazy(mock_config):
    adapter = MockBackend(mock_config())
    stream = adapter.generate_stream("later")
    assert adapter.stream_calls == 0  # nosec B101
    await stream.aclose()
    assert adapter.stream_calls == 0  # nosec B101


@pytest.mark.asyncio
async def test_adapter_stream_error_is_not_retried(mock_config):
    adapter = MockBackend(mock_config(retry_attempts=3, stream=["a", "b", "c"], stream_error_after=1))
    stream = adapter.generate_stream("fragile")
    received = []
    with pytest.raises(ScriptedFailure):
        async for chunk in stream:
            received.append(chunk)
    assert received == ["a"]  # nosec B101
    assert adapter.stream_calls == 1  # nosec B101
    assert adapter.streams_released == 1  # nosec B101
