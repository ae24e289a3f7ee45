from __future__ import annotations

import pytest

from switchboard.base.errors import ConfigurationError, UnknownBackendError, UnsupportedOperationError
from switchboard.base.factory import BackendFactory, create_backend
from switchboard.base.models import BackendConfig, BackendKind
from switchboard.mock.client import MockBackend


class _Exploding:
    def __init__(self, config, **kwargs):
        raise RuntimeError("constructor crashed")


def test_unknown_kind_raises_before_construction():
    with pytest.raises(UnknownBackendError, match="Unknown backend 'not-real'"):
        BackendFactory.create(BackendConfig(backend_kind="not-real"))


def test_unknown_kind_from_mapping():
    with pytest.raises(UnknownBackendError):
        BackendFactory.create({"backend_kind": "nope"})


def test_mapping_config_is_accepted():
    adapter = BackendFactory.create({"backend_kind": "mock", "model": "mock-2"})
    assert isinstance(adapter, MockBackend)  # nosec B101
    assert adapter.model == "mock-2"  # nosec B101


def test_create_returns_fresh_instances(mock_config):
    cfg = mock_config()
    assert create_backend(cfg) is not create_backend(cfg)  # nosec B101


def test_import_failure_is_wrapped(monkeypatch):
    monkeypatch.setitem(BackendFactory._BACKENDS, "mock", {"module": "switchboard.does_not_exist", "class": "X"})
    with pytest.raises(UnknownBackendError, match="Failed to import module"):
        BackendFactory.create(BackendConfig(backend_kind="mock"))


def test_missing_class_is_wrapped(monkeypatch):
    monkeypatch.setitem(BackendFactory._BACKENDS, "mock", {"module": "switchboard.mock.client", "class": "Nope"})
    with pytest.raises(UnknownBackendError, match="not found"):
        BackendFactory.create(BackendConfig(backend_kind="mock"))


def test_constructor_crash_is_wrapped(monkeypatch):
    monkeypatch.setitem(BackendFactory._BACKENDS, "mock", {"module": __name__, "class": "_Exploding"})
    with pytest.raises(UnknownBackendError, match="constructor crashed"):
        BackendFactory.create(BackendConfig(backend_kind="mock"))


def test_configuration_error_propagates(mock_config):
    with pytest.raises(ConfigurationError):
        BackendFactory.create(mock_config(construct_error="missing token"))


def test_grok_requires_key_at_construction():
    with pytest.raises(ConfigurationError, match="requires an API key"):
        BackendFactory.create(BackendConfig(backend_kind=BackendKind.GROK))


@pytest.mark.parametrize("kind", list(BackendKind))
def test_every_registered_kind_builds(kind):
    adapter = BackendFactory.create(BackendConfig(backend_kind=kind, api_key="k-123"))
    assert adapter.get_backend_kind() == kind.value  # nosec B101
    assert adapter.get_token_count() == 0  # nosec B101


@pytest.mark.asyncio
async def test_grok_has_no_embeddings():
    grok = BackendFactory.create(BackendConfig(backend_kind="grok", api_key="k-123", retry_delay_ms=0))
    with pytest.raises(UnsupportedOperationError):
        await grok.generate_embedding("text")
    await grok.aclose()


def test_registry_queries():
    kinds = BackendFactory.get_available_backends()
    assert set(kinds) == set(BackendKind)  # nosec B101
    assert BackendFactory.is_backend_supported("OpenAI") is True  # nosec B101
    assert BackendFactory.is_backend_supported(BackendKind.OLLAMA) is True  # nosec B101
    assert BackendFactory.is_backend_supported("unknown-llm") is False  # nosec B101


def test_backend_info_known_and_fallback():
    grok = BackendFactory.get_backend_info("grok")
    assert grok.name == "xAI Grok"  # nosec B101
    assert grok.is_specialized_for_code is True  # nosec B101
    assert grok.supports("reasoning") is True  # nosec B101
    assert BackendFactory.get_backend_info(BackendKind.OLLAMA).is_local is True  # nosec B101

    unknown = BackendFactory.get_backend_info("acme")
    assert unknown.name == "acme"  # nosec B101
    assert unknown.requires_api_key is True  # nosec B101
    assert unknown.supported_features == ("text",)  # nosec B101
    assert unknown.description == "acme provider"  # nosec B101


def test_recommendations():
    recs = BackendFactory.get_recommendations()
    assert recs == {  # nosec B101
        "general": BackendKind.OPENAI,
        "code": BackendKind.GROK,
        "local": BackendKind.OLLAMA,
        "cost_effective": BackendKind.OPENAI,
        "multimodal": BackendKind.GOOGLE_GEMINI,
    }
