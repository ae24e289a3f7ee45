from __future__ import annotations

import asyncio
import types

import httpx
import pytest

from switchboard.base.errors import (
    AggregateFailure,
    ConfigurationError,
    ErrorCode,
    NoBackendAvailableError,
    ProviderError,
    TransientBackendError,
    UnsupportedOperationError,
    classify_exception,
    is_retryable,
    normalize_error,
)


class _StatusError(Exception):
    def __init__(self, status: int, message: str = "boom") -> None:
        super().__init__(message)
        self.status_code = status


class _ResponseError(Exception):
    def __init__(self, status: int) -> None:
        super().__init__("wrapped response")
        self.response = types.SimpleNamespace(status=status)


@pytest.mark.parametrize(
    "status,code",
    [
        (400, ErrorCode.VALIDATION),
        (401, ErrorCode.AUTH),
        (403, ErrorCode.AUTH),
        (404, ErrorCode.NOT_FOUND),
        (429, ErrorCode.RATE_LIMIT),
        (500, ErrorCode.SERVER_ERROR),
        (502, ErrorCode.TRANSIENT),
        (503, ErrorCode.UNAVAILABLE),
        (599, ErrorCode.SERVER_ERROR),
    ],
)
def test_classify_http_status(status, code):
    assert classify_exception(_StatusError(status)) is code  # nosec B101


def test_classify_status_on_response_object():
    assert classify_exception(_ResponseError(429)) is ErrorCode.RATE_LIMIT  # nosec B101


def test_provider_error_passthrough():
    err = ConfigurationError("missing key", provider="openai")
    assert classify_exception(err) is ErrorCode.CONFIGURATION  # nosec B101


def test_timeouts_and_cancellation():
    assert classify_exception(asyncio.TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(asyncio.CancelledError()) is ErrorCode.CANCELLED  # nosec B101


def test_connection_reset_is_transient():
    assert classify_exception(ConnectionResetError()) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSIENT  # nosec B101


@pytest.mark.parametrize(
    "message,code",
    [
        ("Rate limit exceeded for org", ErrorCode.RATE_LIMIT),
        ("request timed out", ErrorCode.TIMEOUT),
        ("invalid api key supplied", ErrorCode.AUTH),
        ("model does not exist", ErrorCode.NOT_FOUND),
        ("service temporarily down", ErrorCode.UNAVAILABLE),
        ("something odd", ErrorCode.UNKNOWN),
    ],
)
def test_message_heuristics(message, code):
    assert classify_exception(RuntimeError(message)) is code  # nosec B101


@pytest.mark.parametrize("status", [500, 502, 503, 504, 429])
def test_retryable_statuses(status):
    assert is_retryable(_StatusError(status)) is True  # nosec B101


@pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
def test_fatal_statuses(status):
    assert is_retryable(_StatusError(status)) is False  # nosec B101


def test_reset_markers_are_retryable():
    coded = RuntimeError("socket closed")
    coded.code = "ECONNRESET"
    assert is_retryable(ConnectionResetError()) is True  # nosec B101
    assert is_retryable(coded) is True  # nosec B101
    assert is_retryable(httpx.RemoteProtocolError("peer closed")) is True  # nosec B101


def test_reset_detected_through_cause():
    try:
        try:
            raise ConnectionResetError("reset by peer")
        except ConnectionResetError as inner:
            raise RuntimeError("sdk wrapper") from inner
    except RuntimeError as outer:
        assert is_retryable(outer) is True  # nosec B101


def test_plain_errors_are_not_retryable():
    assert is_retryable(ValueError("bad input")) is False  # nosec B101
    assert is_retryable(asyncio.TimeoutError()) is False  # nosec B101
    assert is_retryable(UnsupportedOperationError("generate_embedding", provider="grok")) is False  # nosec B101


def test_provider_error_retry_hint():
    assert is_retryable(TransientBackendError("flaky", provider="ollama")) is True  # nosec B101
    assert is_retryable(ConfigurationError("no key")) is False  # nosec B101
    # an explicit status outranks the hint
    assert is_retryable(TransientBackendError("bad", provider="x", status_code=400)) is False  # nosec B101


def test_normalize_error_wraps_foreign_exception():
    raw = _StatusError(503, "upstream busy")
    err = normalize_error(raw, provider="openai", model="gpt-4o")
    assert isinstance(err, ProviderError)  # nosec B101
    assert err.code is ErrorCode.UNAVAILABLE  # nosec B101
    assert err.status_code == 503  # nosec B101
    assert err.retryable is True  # nosec B101
    assert err.raw is raw  # nosec B101
    assert str(err) == "openai:gpt-4o unavailable: upstream busy"  # nosec B101


def test_normalize_error_returns_provider_error_unchanged():
    err = ConfigurationError("missing", provider="anthropic")
    assert normalize_error(err, provider="other") is err  # nosec B101


def test_unsupported_operation_message():
    err = UnsupportedOperationError("generate_embedding", provider="grok", model="grok-3-beta")
    assert err.message == "generate_embedding is not supported by grok"  # nosec B101
    assert err.operation == "generate_embedding"  # nosec B101
    assert err.code is ErrorCode.UNSUPPORTED  # nosec B101


def test_aggregate_failure_keeps_order_and_message():
    first = ValueError("primary down")
    second = TransientBackendError("fallback flaky", provider="ollama")
    agg = AggregateFailure([first, second])
    assert agg.errors == [first, second]  # nosec B101
    assert agg.messages == ["primary down", "fallback flaky"]  # nosec B101
    assert agg.message == "All backends failed. Errors: primary down; fallback flaky"  # nosec B101
    assert agg.code is ErrorCode.AGGREGATE  # nosec B101
    assert agg.raw is second  # nosec B101


def test_no_backend_available_defaults():
    err = NoBackendAvailableError()
    assert err.message == "No backend available"  # nosec B101
    assert err.code is ErrorCode.UNAVAILABLE  # nosec B101
    assert err.provider == "manager"  # nosec B101
