"""Backend registry and factory.

Purpose
-------
Map a backend kind to the adapter class implementing the capability
contract and expose static metadata about every kind. Adapters are imported
lazily with ``importlib`` so a missing vendor SDK only breaks construction of
that one backend, never the import of this module or of the manager.

External dependencies
---------------------
- Standard library only (``importlib``). Adapters bring their own SDKs.

Semantics
---------
- ``create`` never caches: every call returns a fresh adapter.
- Unknown kinds, unimportable adapter modules, missing classes and
  constructor crashes raise :class:`UnknownBackendError`.
- Configuration problems detected by a constructor (e.g. a required API key
  missing) propagate as :class:`ConfigurationError`.
- ``get_backend_info`` never fails: unknown kinds get a generic record.
"""

from __future__ import annotations

import logging
from importlib import import_module
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import ProviderError, UnknownBackendError
from .interfaces import BackendAdapter, UsageRecorder
from .models import BackendConfig, BackendInfo, BackendKind, kind_value

ConfigInput = Union[BackendConfig, Mapping[str, Any]]


_BACKEND_INFO: Dict[str, BackendInfo] = {
    BackendKind.OPENAI.value: BackendInfo(
        name="OpenAI",
        requires_api_key=True,
        supported_features=("text", "code", "embeddings", "streaming", "vision"),
        description="OpenAI GPT models including GPT-4o, GPT-4 Turbo, and GPT-3.5 Turbo",
    ),
    BackendKind.ANTHROPIC.value: BackendInfo(
        name="Anthropic Claude",
        requires_api_key=True,
        supported_features=("text", "code", "streaming", "vision"),
        description="Claude 3.5 and Claude 3 models with advanced reasoning capabilities",
    ),
    BackendKind.GOOGLE_GEMINI.value: BackendInfo(
        name="Google Gemini",
        requires_api_key=True,
        supported_features=("text", "code", "embeddings", "streaming", "vision", "multimodal"),
        description="Google Gemini 2.0 and 1.5 models with multimodal capabilities",
    ),
    BackendKind.GITHUB_COPILOT.value: BackendInfo(
        name="GitHub Copilot",
        requires_api_key=True,
        supported_features=("text", "code", "embeddings", "streaming"),
        is_specialized_for_code=True,
        description="GitHub Copilot chat models through the Copilot API",
    ),
    BackendKind.OLLAMA.value: BackendInfo(
        name="Ollama",
        requires_api_key=False,
        supported_features=("text", "code", "embeddings", "streaming"),
        is_local=True,
        description="Local models including Llama, Mistral, CodeLlama, and many others",
    ),
    BackendKind.LITELLM.value: BackendInfo(
        name="LiteLLM Proxy",
        requires_api_key=False,
        supported_features=("text", "code", "embeddings", "streaming"),
        is_local=True,
        description="Unified proxy for 100+ LLM providers with OpenAI-compatible API",
    ),
    BackendKind.GROK.value: BackendInfo(
        name="xAI Grok",
        requires_api_key=True,
        supported_features=("text", "code", "streaming", "search", "reasoning"),
        is_specialized_for_code=True,
        description="xAI Grok models with real-time search and advanced reasoning capabilities",
    ),
    BackendKind.MOCK.value: BackendInfo(
        name="Mock",
        requires_api_key=False,
        supported_features=("text", "code", "embeddings", "streaming"),
        is_local=True,
        description="Deterministic offline backend for tests and dry runs",
    ),
}


class BackendFactory:
    """Create backend adapters from a :class:`BackendConfig`.

    Design notes
    ------------
    - The kind -> (module, class) table is the only registry. Adding a
      backend means one :class:`BackendKind` member plus one entry here; the
      manager never changes.
    - The table is class-level and read-only at runtime, so independent
      managers in one process share nothing mutable through the factory.
    """

    _BACKENDS: Dict[str, Dict[str, str]] = {
        BackendKind.OPENAI.value: {"module": "switchboard.openai.client", "class": "OpenAIBackend"},
        BackendKind.ANTHROPIC.value: {"module": "switchboard.anthropic.client", "class": "AnthropicBackend"},
        BackendKind.GOOGLE_GEMINI.value: {"module": "switchboard.gemini.client", "class": "GeminiBackend"},
        BackendKind.GITHUB_COPILOT.value: {"module": "switchboard.github_copilot.client", "class": "CopilotBackend"},
        BackendKind.OLLAMA.value: {"module": "switchboard.ollama.client", "class": "OllamaBackend"},
        BackendKind.LITELLM.value: {"module": "switchboard.litellm.client", "class": "LiteLLMBackend"},
        BackendKind.GROK.value: {"module": "switchboard.xai.client", "class": "GrokBackend"},
        BackendKind.MOCK.value: {"module": "switchboard.mock.client", "class": "MockBackend"},
    }

    @classmethod
    def create(
        cls,
        config: ConfigInput,
        *,
        usage_recorder: Optional[UsageRecorder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> BackendAdapter:
        """Create a fresh adapter for ``config.backend_kind``.

        Parameters
        ----------
        config:
            A :class:`BackendConfig`, or a mapping of its fields.
        usage_recorder:
            Optional accounting collaborator handed to the adapter.
        logger:
            Optional logger override for the adapter.

        Raises
        ------
        UnknownBackendError
            Unknown kind, import failure, missing class, bad constructor
            arguments or an unexpected constructor crash.
        ConfigurationError
            The adapter rejected its configuration.
        """
        raw_kind = config.backend_kind if isinstance(config, BackendConfig) else config.get("backend_kind")
        name = kind_value(raw_kind or "")
        spec = cls._BACKENDS.get(name)
        if not spec:
            raise UnknownBackendError(f"Unknown backend '{raw_kind}'", provider=name or "unknown")

        if not isinstance(config, BackendConfig):
            config = BackendConfig(**dict(config))

        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:
            raise UnknownBackendError(
                f"Failed to import module '{module_path}' for backend '{name}': {exc}",
                provider=name,
                raw=exc,
            ) from exc

        try:
            klass = getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownBackendError(
                f"Adapter class '{class_name}' not found in '{module_path}' for backend '{name}'",
                provider=name,
                raw=exc,
            ) from exc

        try:
            return klass(config, usage_recorder=usage_recorder, logger=logger)
        except ProviderError:
            raise
        except TypeError as exc:
            raise UnknownBackendError(
                f"Invalid arguments for '{name}' adapter constructor: {exc}",
                provider=name,
                raw=exc,
            ) from exc
        except Exception as exc:
            raise UnknownBackendError(
                f"Failed to initialize backend '{name}': {exc}",
                provider=name,
                raw=exc,
            ) from exc

    @classmethod
    def get_available_backends(cls) -> List[BackendKind]:
        """Return every registered kind in registry order."""
        return [BackendKind(name) for name in cls._BACKENDS]

    @classmethod
    def is_backend_supported(cls, kind: Union[BackendKind, str]) -> bool:
        return kind_value(kind) in cls._BACKENDS

    @staticmethod
    def get_backend_info(kind: Union[BackendKind, str]) -> BackendInfo:
        """Return static metadata for ``kind``; unknown kinds get a generic record."""
        name = kind_value(kind)
        info = _BACKEND_INFO.get(name)
        if info is not None:
            return info
        return BackendInfo(
            name=name,
            requires_api_key=True,
            supported_features=("text",),
            description=f"{name} provider",
        )

    @staticmethod
    def get_recommendations() -> Dict[str, BackendKind]:
        """Static routing hints; manager configuration always overrides them."""
        return {
            "general": BackendKind.OPENAI,
            "code": BackendKind.GROK,
            "local": BackendKind.OLLAMA,
            "cost_effective": BackendKind.OPENAI,
            "multimodal": BackendKind.GOOGLE_GEMINI,
        }


def create_backend(config: ConfigInput, **kwargs: Any) -> BackendAdapter:
    """Shorthand for :meth:`BackendFactory.create`."""
    return BackendFactory.create(config, **kwargs)


__all__ = ["BackendFactory", "create_backend", "ConfigInput"]
