"""BackendManager routing, fallback and accounting over scripted backends."""
from __future__ import annotations

import pytest

from switchboard.base.errors import (
    AggregateFailure,
    ConfigurationError,
    NoBackendAvailableError,
    UnsupportedOperationError,
)
from switchboard.base.models import BackendConfig, BackendKind, CodeAnalysisRequest
from switchboard.base.routing import BackendManager, ManagerConfig
from switchboard.mock.client import ScriptedFailure


def _cfg(kind: str, **extra) -> BackendConfig:
    return BackendConfig(backend_kind=kind, retry_attempts=1, retry_delay_ms=0, extra=extra)


def _manager(mock_factory, providers, logger=None, **options) -> BackendManager:
    return BackendManager(ManagerConfig(providers=providers, **options), factory=mock_factory, logger=logger)


def test_explicit_primary_wins(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai"), _cfg("ollama")], primary_provider="ollama")
    assert manager.get_primary().get_backend_kind() == "ollama"  # nosec B101
    assert manager.get_configured_providers() == ["openai", "ollama"]  # nosec B101


def test_first_constructed_backend_becomes_primary(mock_factory, captured_logger):
    logger, handler = captured_logger
    manager = _manager(
        mock_factory,
        [_cfg("openai", construct_error="no key"), _cfg("ollama"), _cfg("grok")],
        logger=logger,
        primary_provider="openai",
    )
    assert manager.get_primary().get_backend_kind() == "ollama"  # nosec B101
    assert manager.get_configured_providers() == ["ollama", "grok"]  # nosec B101
    assert manager.is_provider_configured("openai") is False  # nosec B101
    (skipped,) = handler.named("manager.backend.skipped")
    assert skipped["provider"] == "openai"  # nosec B101
    assert skipped["error_code"] == "configuration"  # nosec B101


def test_partial_availability_with_real_factory():
    manager = BackendManager(
        {
            "providers": [
                {"backend_kind": "grok"},
                {"backend_kind": "mystery"},
                {"backend_kind": "mock"},
            ],
        }
    )
    assert manager.get_configured_providers() == ["mock"]  # nosec B101
    assert manager.get_primary().get_backend_kind() == "mock"  # nosec B101


@pytest.mark.asyncio
async def test_no_backend_fails_fast(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai", construct_error="no key")])
    assert manager.get_primary() is None  # nosec B101
    with pytest.raises(NoBackendAvailableError):
        await manager.generate_text("hello")
    with pytest.raises(NoBackendAvailableError):
        manager.generate_stream("hello")
    with pytest.raises(NoBackendAvailableError):
        await manager.generate_embedding("hello")
    with pytest.raises(NoBackendAvailableError):
        await manager.analyze_code(CodeAnalysisRequest(code="x = 1", language="python"))


@pytest.mark.asyncio
async def test_unconfigured_explicit_backend_fails_fast(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai")])
    with pytest.raises(NoBackendAvailableError):
        await manager.generate_text("hello", provider="anthropic")
    assert manager.get_provider("openai").calls == 0  # nosec B101


@pytest.mark.asyncio
async def test_fallback_walks_in_configured_order(mock_factory, captured_logger):
    logger, handler = captured_logger
    manager = _manager(
        mock_factory,
        [
            BackendConfig(
                backend_kind="openai",
                retry_attempts=2,
                retry_delay_ms=0,
                extra={"fail_times": -1, "fail_status": 503, "fail_message": "openai down"},
            ),
            _cfg("ollama", fail_times=-1, fail_status=500, fail_message="ollama down"),
            _cfg("grok", responses={"*": "from grok"}),
        ],
        logger=logger,
        fallback_providers=["ollama", "grok"],
    )
    envelope = await manager.generate_text("route me")

    assert envelope.content == "from grok"  # nosec B101
    assert manager.get_provider("openai").calls == 2  # nosec B101
    assert manager.get_provider("ollama").calls == 1  # nosec B101
    assert manager.get_provider("grok").calls == 1  # nosec B101
    hops = handler.named("manager.fallback")
    assert [h["provider"] for h in hops] == ["ollama", "grok"]  # nosec B101
    assert [h["error"] for h in hops] == ["openai down", "ollama down"]  # nosec B101
    assert handler.named("manager.fallback.exhausted") == []  # nosec B101


@pytest.mark.asyncio
async def test_all_candidates_failing_raise_aggregate(mock_factory, captured_logger):
    logger, handler = captured_logger
    manager = _manager(
        mock_factory,
        [
            _cfg("openai", fail_times=-1, fail_message="p failed"),
            _cfg("ollama", fail_times=-1, fail_message="f1 failed"),
            _cfg("grok", fail_times=-1, fail_message="f2 failed"),
        ],
        logger=logger,
        fallback_providers=["ollama", "grok"],
    )
    with pytest.raises(AggregateFailure) as excinfo:
        await manager.generate_text("doomed")

    agg = excinfo.value
    assert agg.messages == ["p failed", "f1 failed", "f2 failed"]  # nosec B101
    assert all(isinstance(e, ScriptedFailure) for e in agg.errors)  # nosec B101
    assert agg.message == "All backends failed. Errors: p failed; f1 failed; f2 failed"  # nosec B101
    assert len(handler.named("manager.fallback.exhausted")) == 1  # nosec B101


@pytest.mark.asyncio
async def test_explicit_target_failure_falls_back_to_primary(mock_factory):
    manager = _manager(
        mock_factory,
        [_cfg("openai", responses={"*": "primary answer"}), _cfg("ollama", fail_times=-1)],
        fallback_providers=["ollama"],
    )
    envelope = await manager.generate_text("hi", provider="ollama")
    assert envelope.content == "primary answer"  # nosec B101
    # the failed target is not retried as a fallback
    assert manager.get_provider("ollama").calls == 1  # nosec B101


@pytest.mark.asyncio
async def test_fallback_disabled_propagates_original_error(mock_factory):
    manager = _manager(
        mock_factory,
        [_cfg("openai", fail_times=-1, fail_message="raw failure"), _cfg("ollama")],
        fallback_providers=["ollama"],
        enable_fallback=False,
    )
    with pytest.raises(ScriptedFailure, match="raw failure"):
        await manager.generate_text("hi")
    assert manager.get_provider("ollama").calls == 0  # nosec B101


@pytest.mark.asyncio
async def test_without_fallbacks_error_propagates_unchanged(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai", fail_times=-1), _cfg("ollama")])
    with pytest.raises(ScriptedFailure):
        await manager.generate_text("hi")


@pytest.mark.asyncio
async def test_stream_never_falls_back(mock_factory):
    manager = _manager(
        mock_factory,
        [_cfg("openai", stream=["a", "b"], stream_error_after=2), _cfg("ollama")],
        fallback_providers=["ollama"],
    )
    received = []
    with pytest.raises(ScriptedFailure):
        async for chunk in manager.generate_stream("tell me"):
            received.append(chunk)
    assert received == ["a", "b"]  # nosec B101
    ollama = manager.get_provider("ollama")
    assert ollama.stream_calls == 0  # nosec B101
    assert ollama.calls == 0  # nosec B101


@pytest.mark.asyncio
async def test_unsupported_embedding_falls_back(mock_factory):
    manager = _manager(
        mock_factory,
        [_cfg("openai", supports_embeddings=False), _cfg("ollama", embedding=[0.1, 0.2])],
        fallback_providers=["ollama"],
    )
    assert await manager.generate_embedding("vec") == [0.1, 0.2]  # nosec B101


@pytest.mark.asyncio
async def test_unsupported_embedding_without_fallback(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai", supports_embeddings=False)])
    with pytest.raises(UnsupportedOperationError):
        await manager.generate_embedding("vec")


@pytest.mark.asyncio
async def test_analyze_code_prefers_code_specialized_backend(mock_factory, monkeypatch):
    manager = _manager(mock_factory, [_cfg("openai"), _cfg("grok", responses={"*": "grok review"})])
    monkeypatch.setattr(manager, "_primary", None)
    envelope = await manager.analyze_code(CodeAnalysisRequest(code="x = 1", language="python"))
    assert envelope.content == "grok review"  # nosec B101
    assert manager.get_provider("openai").calls == 0  # nosec B101


@pytest.mark.asyncio
async def test_analyze_code_uses_primary_when_set(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai", responses={"*": "openai review"}), _cfg("grok")])
    envelope = await manager.analyze_code(CodeAnalysisRequest(code="x = 1", language="python"))
    assert envelope.content == "openai review"  # nosec B101


@pytest.mark.asyncio
async def test_token_counts_aggregate_and_reset(mock_factory):
    manager = _manager(
        mock_factory,
        [
            _cfg("openai", responses={"*": {"text": "a", "usage": {"total": 10}}}),
            _cfg("ollama", responses={"*": {"text": "b", "usage": {"total": 5}}}),
        ],
    )
    await manager.generate_text("one")
    await manager.generate_text("two", provider=BackendKind.OLLAMA)
    assert manager.get_token_count() == 15  # nosec B101
    assert manager.get_provider_token_count("ollama") == 5  # nosec B101
    assert manager.get_provider_token_count("anthropic") == 0  # nosec B101
    manager.reset_token_count()
    assert manager.get_token_count() == 0  # nosec B101


@pytest.mark.asyncio
async def test_usage_recorder_is_shared(mock_factory, usage_log):
    manager = BackendManager(
        ManagerConfig(providers=[_cfg("openai"), _cfg("ollama")]),
        factory=mock_factory,
        usage_recorder=usage_log,
    )
    await manager.generate_text("a")
    await manager.generate_text("b", provider="ollama")
    assert [r.provider for r in usage_log.records()] == ["openai", "ollama"]  # nosec B101


@pytest.mark.asyncio
async def test_available_models_are_labelled(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai", models=["m1"]), _cfg("ollama")])
    assert await manager.get_available_models() == ["OpenAI: m1", "Ollama: mock-1"]  # nosec B101
    assert await manager.get_available_models("ollama") == ["mock-1"]  # nosec B101
    assert await manager.get_available_models("grok") == []  # nosec B101


@pytest.mark.asyncio
async def test_validate_and_initialize_never_raise(mock_factory, captured_logger):
    logger, handler = captured_logger
    manager = _manager(
        mock_factory,
        [_cfg("openai", valid=False, init_error="daemon down"), _cfg("ollama")],
        logger=logger,
    )
    await manager.initialize()
    (failed,) = handler.named("manager.init.failed")
    assert failed["provider"] == "openai"  # nosec B101
    assert manager.get_configured_providers() == ["openai", "ollama"]  # nosec B101
    assert await manager.validate_providers() == {"openai": False, "ollama": True}  # nosec B101


def test_set_primary_provider(mock_factory):
    manager = _manager(mock_factory, [_cfg("openai"), _cfg("ollama")])
    manager.set_primary_provider(BackendKind.OLLAMA)
    assert manager.get_provider().get_backend_kind() == "ollama"  # nosec B101
    with pytest.raises(ConfigurationError, match="Backend grok not configured"):
        manager.set_primary_provider("grok")


def test_manager_retry_defaults_fill_unset_fields(mock_factory):
    manager = _manager(
        mock_factory,
        [BackendConfig(backend_kind="openai"), BackendConfig(backend_kind="ollama", retry_attempts=1)],
        max_retries=5,
        retry_delay_ms=0,
    )
    assert manager.get_provider("openai").config.retry_attempts == 5  # nosec B101
    assert manager.get_provider("openai").config.retry_delay_ms == 0  # nosec B101
    assert manager.get_provider("ollama").config.retry_attempts == 1  # nosec B101


def test_manager_config_normalizes_kinds():
    cfg = ManagerConfig(primary_provider=BackendKind.OLLAMA, fallback_providers="OpenAI")
    assert cfg.primary_provider == "ollama"  # nosec B101
    assert cfg.fallback_providers == ["openai"]  # nosec B101
    assert ManagerConfig(primary_provider="").primary_provider is None  # nosec B101


def test_fallback_list_skips_unconfigured_and_duplicates(mock_factory):
    manager = _manager(
        mock_factory,
        [_cfg("openai"), _cfg("ollama")],
        fallback_providers=["ollama", "anthropic", "ollama"],
    )
    assert [a.get_backend_kind() for a in manager._fallbacks] == ["ollama"]  # nosec B101


def test_managers_do_not_share_registries(mock_factory):
    cfg = ManagerConfig(providers=[_cfg("openai")])
    first = BackendManager(cfg, factory=mock_factory)
    second = BackendManager(cfg, factory=mock_factory)
    assert first.get_primary() is not second.get_primary()  # nosec B101


@pytest.mark.asyncio
async def test_async_context_manager_closes_adapters(mock_factory):
    async with _manager(mock_factory, [_cfg("openai")]) as manager:
        await manager.generate_text("hi")
        client = manager.get_primary()._client
    assert client.closed is True  # nosec B101


@pytest.mark.asyncio
async def test_failing_close_does_not_leak_later_adapters(mock_factory, captured_logger, monkeypatch):
    logger, handler = captured_logger
    manager = _manager(mock_factory, [_cfg("openai"), _cfg("ollama"), _cfg("grok")], logger=logger)
    await manager.initialize()
    clients = {kind: manager.get_provider(kind)._client for kind in ("ollama", "grok")}

    async def _broken_close():
        raise RuntimeError("socket already gone")

    monkeypatch.setattr(manager.get_provider("openai"), "aclose", _broken_close)
    async with manager:
        pass

    assert all(client.closed for client in clients.values())  # nosec B101
    assert manager.get_provider("ollama")._client is None  # nosec B101
    (failed,) = handler.named("manager.close.failed")
    assert failed["provider"] == "openai"  # nosec B101
    assert failed["error"] == "socket already gone"  # nosec B101


@pytest.mark.asyncio
async def test_fallback_hop_carries_diagnostics(mock_factory, captured_logger):
    logger, handler = captured_logger
    manager = _manager(
        mock_factory,
        [_cfg("openai", fail_times=-1, fail_status=429, fail_message="slow down"), _cfg("ollama")],
        logger=logger,
        fallback_providers=["ollama"],
    )
    await manager.generate_text("route me")
    (hop,) = handler.named("manager.fallback")
    assert hop["provider"] == "ollama"  # nosec B101
    assert hop["failed_provider"] == "openai"  # nosec B101
    assert hop["error_code"] == "rate_limit"  # nosec B101
    assert hop["status_code"] == 429  # nosec B101
    assert hop["retryable"] is True  # nosec B101
