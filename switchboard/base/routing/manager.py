"""Backend manager with primary selection and ordered fallback.

Purpose
-------
Own one registry of constructed adapters and dispatch every capability to
them: an explicit backend id wins, else the primary. When the dispatched
call fails and fallback is enabled, the same operation is walked across the
primary (unless it was the failed target) and then every configured fallback
in order; the first success wins and otherwise :class:`AggregateFailure`
carries every collected error.

Availability policy
-------------------
- Construction never aborts because one backend fails to build; the failure
  is logged as ``manager.backend.skipped`` and the rest are kept.
- ``initialize`` initializes all adapters concurrently. Individual failures
  are logged as ``manager.init.failed``; the adapter stays registered and
  fails on first use.
- ``aclose`` closes every adapter; a failing close is logged as
  ``manager.close.failed`` and the remaining adapters are still closed.
- With no constructed adapter every dispatch raises
  :class:`NoBackendAvailableError` before touching the network.

Streaming
---------
``generate_stream`` resolves exactly one adapter and returns its
:class:`TextStream`. It never falls back: fragments already delivered could
not be reconciled with another backend's output.

Concurrency
-----------
Each manager owns its own registry; nothing is shared between instances.
Registry mutation (``set_primary_provider``) is not synchronized and assumes
a single writer; concurrent dispatch only reads the registry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from ..errors import (
    AggregateFailure,
    ConfigurationError,
    NoBackendAvailableError,
    classify_exception,
    normalize_error,
)
from ..factory import BackendFactory
from ..interfaces import BackendAdapter, UsageRecorder
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import (
    BackendConfig,
    BackendKind,
    CodeAnalysisRequest,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
    kind_value,
)
from ..streaming import TextStream
from .manager_config import ManagerConfig

T = TypeVar("T")
KindLike = Union[BackendKind, str]
Operation = Callable[[BackendAdapter], Awaitable[T]]


class BackendManager:
    """Route capability calls across configured backends.

    Example
    -------
        manager = BackendManager(
            ManagerConfig(
                providers=[BackendConfig(backend_kind="openai", api_key="..."),
                           BackendConfig(backend_kind="ollama")],
                fallback_providers=["ollama"],
            )
        )
        await manager.initialize()
        envelope = await manager.generate_text("Explain the diff")
    """

    def __init__(
        self,
        config: Union[ManagerConfig, Mapping[str, Any]],
        *,
        usage_recorder: Optional[UsageRecorder] = None,
        factory: Any = BackendFactory,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config if isinstance(config, ManagerConfig) else ManagerConfig.model_validate(config)
        self._factory = factory
        self._usage_recorder = usage_recorder
        self._logger = logger or get_logger("switchboard.manager")
        self._adapters: Dict[str, BackendAdapter] = {}
        self._primary: Optional[BackendAdapter] = None
        self._fallbacks: List[BackendAdapter] = []
        self._build_registry()

    # ------------------------------------------------------------------
    # Construction

    def _with_retry_defaults(self, cfg: BackendConfig) -> BackendConfig:
        """Apply manager-wide retry settings the provider config left unset."""
        changes: Dict[str, Any] = {}
        if "retry_attempts" not in cfg.model_fields_set:
            changes["retry_attempts"] = self._config.max_retries
        if "retry_delay_ms" not in cfg.model_fields_set:
            changes["retry_delay_ms"] = self._config.retry_delay_ms
        return cfg.with_overrides(**changes) if changes else cfg

    def _build_registry(self) -> None:
        for provider_cfg in self._config.providers:
            kind = provider_cfg.backend_kind
            try:
                adapter = self._factory.create(
                    self._with_retry_defaults(provider_cfg),
                    usage_recorder=self._usage_recorder,
                )
            except Exception as exc:
                normalized_log_event(
                    self._logger,
                    "manager.backend.skipped",
                    LogContext(provider=kind, model=provider_cfg.model),
                    phase="construct",
                    error_code=classify_exception(exc).value,
                    emitted=False,
                    level=logging.WARNING,
                    error=str(exc),
                )
                continue
            self._adapters[kind] = adapter

        primary = self._config.primary_provider
        if primary and primary in self._adapters:
            self._primary = self._adapters[primary]
        elif self._adapters:
            self._primary = next(iter(self._adapters.values()))

        seen = set()
        for kind in self._config.fallback_providers:
            adapter = self._adapters.get(kind)
            if adapter is not None and kind not in seen:
                seen.add(kind)
                self._fallbacks.append(adapter)

    # ------------------------------------------------------------------
    # Lifecycle

    async def initialize(self) -> None:
        """Initialize every adapter concurrently; failures are logged, not raised."""
        kinds = list(self._adapters)
        results = await asyncio.gather(
            *(self._adapters[k].initialize() for k in kinds),
            return_exceptions=True,
        )
        for kind, result in zip(kinds, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                normalized_log_event(
                    self._logger,
                    "manager.init.failed",
                    LogContext(provider=kind),
                    phase="init",
                    error_code=classify_exception(result).value,
                    emitted=False,
                    level=logging.WARNING,
                    error=str(result),
                )

    async def validate_providers(self) -> Dict[str, bool]:
        """Probe each adapter in registry order."""
        results: Dict[str, bool] = {}
        for kind, adapter in self._adapters.items():
            results[kind] = await adapter.validate_config()
        return results

    async def aclose(self) -> None:
        """Close every adapter; one failing close never skips the rest."""
        for kind, adapter in self._adapters.items():
            try:
                await adapter.aclose()
            except Exception as exc:
                normalized_log_event(
                    self._logger,
                    "manager.close.failed",
                    LogContext(provider=kind),
                    phase="close",
                    error_code=classify_exception(exc).value,
                    emitted=False,
                    level=logging.WARNING,
                    error=str(exc),
                )

    async def __aenter__(self) -> "BackendManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Registry access

    def get_provider(self, kind: Optional[KindLike] = None) -> Optional[BackendAdapter]:
        if kind is not None:
            return self._adapters.get(kind_value(kind))
        return self._primary

    def get_primary(self) -> Optional[BackendAdapter]:
        return self._primary

    def set_primary_provider(self, kind: KindLike) -> None:
        name = kind_value(kind)
        adapter = self._adapters.get(name)
        if adapter is None:
            raise ConfigurationError(f"Backend {name} not configured", provider=name)
        self._primary = adapter

    def get_configured_providers(self) -> List[str]:
        return list(self._adapters)

    def is_provider_configured(self, kind: KindLike) -> bool:
        return kind_value(kind) in self._adapters

    def _resolve(self, kind: Optional[KindLike]) -> BackendAdapter:
        adapter = self.get_provider(kind)
        if adapter is None:
            raise NoBackendAvailableError(provider=kind_value(kind) if kind is not None else "manager")
        return adapter

    # ------------------------------------------------------------------
    # Dispatch

    async def _dispatch(self, target: BackendAdapter, operation: Operation, name: str) -> T:
        try:
            return await operation(target)
        except Exception as exc:
            if not self._config.enable_fallback or not self._fallbacks:
                raise
            return await self._execute_with_fallback(operation, name, target, exc)

    async def _execute_with_fallback(
        self,
        operation: Operation,
        name: str,
        failed: BackendAdapter,
        first_error: Exception,
    ) -> T:
        """Walk primary then fallbacks, skipping the already failed target."""
        errors: List[BaseException] = [first_error]
        candidates: List[BackendAdapter] = []
        if self._primary is not None and self._primary is not failed:
            candidates.append(self._primary)
        for adapter in self._fallbacks:
            if adapter is not failed and adapter not in candidates:
                candidates.append(adapter)

        failed_kind = failed.get_backend_kind()
        for adapter in candidates:
            previous = normalize_error(errors[-1], failed_kind)
            normalized_log_event(
                self._logger,
                "manager.fallback",
                LogContext(provider=adapter.get_backend_kind(), extra={"operation": name}),
                phase="fallback",
                attempt=len(errors) + 1,
                error_code=previous.code.value,
                emitted=False,
                level=logging.WARNING,
                failed_provider=previous.provider,
                status_code=previous.status_code,
                retryable=previous.retryable,
                error=str(errors[-1]),
            )
            try:
                return await operation(adapter)
            except Exception as exc:
                errors.append(exc)
                failed_kind = adapter.get_backend_kind()

        normalized_log_event(
            self._logger,
            "manager.fallback.exhausted",
            LogContext(provider="manager", extra={"operation": name}),
            phase="fallback",
            attempt=len(errors),
            error_code="aggregate",
            emitted=False,
            level=logging.ERROR,
            errors=[str(e) for e in errors],
        )
        raise AggregateFailure(errors)

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        provider: Optional[KindLike] = None,
    ) -> ResponseEnvelope:
        target = self._resolve(provider)
        return await self._dispatch(
            target, lambda a: a.generate_text(prompt, system_prompt), "generate_text"
        )

    def generate_stream(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        provider: Optional[KindLike] = None,
    ) -> TextStream:
        """Return the single resolved adapter's stream; no fallback."""
        return self._resolve(provider).generate_stream(prompt, system_prompt)

    async def summarize(
        self,
        request: SummarizationRequest,
        provider: Optional[KindLike] = None,
    ) -> ResponseEnvelope:
        target = self._resolve(provider)
        return await self._dispatch(target, lambda a: a.summarize(request), "summarize")

    async def analyze_code(
        self,
        request: CodeAnalysisRequest,
        provider: Optional[KindLike] = None,
    ) -> ResponseEnvelope:
        """Analyze code, preferring a code-specialized backend when nothing else is chosen."""
        target = self.get_provider(provider)
        if provider is None and target is None:
            for kind, adapter in self._adapters.items():
                if self._factory.get_backend_info(kind).is_specialized_for_code:
                    target = adapter
                    break
        if target is None:
            raise NoBackendAvailableError(provider=kind_value(provider) if provider is not None else "manager")
        return await self._dispatch(target, lambda a: a.analyze_code(request), "analyze_code")

    async def generate_diagram(
        self,
        request: DiagramGenerationRequest,
        provider: Optional[KindLike] = None,
    ) -> ResponseEnvelope:
        target = self._resolve(provider)
        return await self._dispatch(target, lambda a: a.generate_diagram(request), "generate_diagram")

    async def generate_embedding(
        self,
        text: str,
        provider: Optional[KindLike] = None,
    ) -> List[float]:
        """Embed ``text``; an unsupporting backend hands over to the fallback chain."""
        target = self._resolve(provider)
        return await self._dispatch(target, lambda a: a.generate_embedding(text), "generate_embedding")

    # ------------------------------------------------------------------
    # Accounting and listing

    def get_token_count(self) -> int:
        return sum(adapter.get_token_count() for adapter in self._adapters.values())

    def reset_token_count(self) -> None:
        for adapter in self._adapters.values():
            adapter.reset_token_count()

    def get_provider_token_count(self, kind: KindLike) -> int:
        adapter = self._adapters.get(kind_value(kind))
        return adapter.get_token_count() if adapter is not None else 0

    async def get_available_models(self, provider: Optional[KindLike] = None) -> List[str]:
        """List one backend's models, or every backend's models labelled by display name."""
        if provider is not None:
            adapter = self._adapters.get(kind_value(provider))
            return await adapter.get_model_list() if adapter is not None else []
        labels: List[str] = []
        for kind, adapter in self._adapters.items():
            display = self._factory.get_backend_info(kind).name
            labels.extend(f"{display}: {model}" for model in await adapter.get_model_list())
        return labels


__all__ = ["BackendManager"]
