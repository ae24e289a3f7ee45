"""Shared resilience wrapper inherited by every backend adapter.

Purpose
-------
Implement the parts of the capability contract that do not depend on a
vendor: lazy client creation, idempotent initialization, bounded retry with
exponential backoff, token accounting, usage recording, the convenience
operations and the never-raising validation / model-listing wrappers.
Concrete adapters supply a handful of hooks:

- ``_create_client()``: build the SDK/HTTP client (raise ``ConfigurationError``
  when credentials are missing).
- ``_complete(prompt, system_prompt)``: one vendor call returning a
  :class:`Completion`.
- ``_stream(prompt, system_prompt)``: async generator of text fragments.
- optionally ``_embed``, ``_probe``, ``_list_models_live`` and the prompt
  builder hooks.

External dependencies
---------------------
None directly; adapters bring their own SDKs.

Timeout and retry semantics
---------------------------
- Each attempt of ``_complete`` is bounded by ``config.timeout_seconds``; there is
  no budget shared across attempts or backends.
- Retry follows :mod:`switchboard.base.resilience.retry` with
  ``config.retry_attempts`` and ``config.retry_delay_ms``. The last error is
  re-raised unchanged.
- Streams are never retried: fragments already delivered cannot be replayed.

Failure modes
-------------
- Usage recorder failures are logged as ``usage.record.failed`` and dropped;
  they never fail the generation.
- ``validate_config`` and ``get_model_list`` never raise.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from contextlib import aclosing, contextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Awaitable, Callable, ClassVar, Iterator, List, Optional, Tuple, TypeVar

from .errors import ConfigurationError, UnsupportedOperationError, classify_exception, normalize_error
from .logging import LogContext, get_logger, normalized_log_event
from .models import (
    BackendConfig,
    CodeAnalysisRequest,
    Completion,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
)
from .interfaces import UsageRecorder
from .pricing import estimate_cost
from .prompts import PromptPair, code_analysis_prompt, diagram_prompt, summarization_prompt
from .resilience.retry import AttemptLogger, RetryConfig, retry_async
from .streaming import TextStream
from .tokens import estimate_tokens
from .usage import UsageRecord

T = TypeVar("T")

# (adapter, model) pinned for the current task by _pinned_model
_MODEL_PIN: ContextVar[Optional[Tuple[Any, str]]] = ContextVar("switchboard_model_pin", default=None)


class BaseBackendAdapter(ABC):
    """Base class implementing the capability contract around vendor hooks."""

    backend_kind: ClassVar[str] = "unknown"
    display_name: ClassVar[str] = "Unknown"
    default_model: ClassVar[Optional[str]] = None
    static_models: ClassVar[Tuple[str, ...]] = ()

    def __init__(
        self,
        config: BackendConfig,
        *,
        usage_recorder: Optional[UsageRecorder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        # set by adapters that can retarget after construction; the config stays as built
        self._model_override: Optional[str] = None
        self._client: Any = None
        self._token_count = 0
        self._usage_recorder = usage_recorder
        self._logger = logger or get_logger(f"switchboard.{self.backend_kind}")

    # ------------------------------------------------------------------
    # Introspection

    @property
    def config(self) -> BackendConfig:
        return self._config

    @property
    def model(self) -> Optional[str]:
        """Pinned model for the current task, else the override, else configured, else the adapter default."""
        pin = _MODEL_PIN.get()
        if pin is not None and pin[0] is self:
            return pin[1]
        return self._model_override or self._config.model or self.default_model

    @contextmanager
    def _pinned_model(self, model: Optional[str]) -> Iterator[None]:
        """Route calls made by the current task to ``model`` without touching the config."""
        token = _MODEL_PIN.set((self, model) if model else None)
        try:
            yield
        finally:
            _MODEL_PIN.reset(token)

    def get_backend_kind(self) -> str:
        return self.backend_kind

    def _ctx(self, **extra: Any) -> LogContext:
        return LogContext(provider=self.backend_kind, model=self.model, extra=extra)

    # ------------------------------------------------------------------
    # Client lifecycle

    @abstractmethod
    def _create_client(self) -> Any:
        """Build the vendor client. Raise ``ConfigurationError`` on missing credentials."""

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
            normalized_log_event(self._logger, "backend.init", self._ctx(), phase="init", emitted=True)
        return self._client

    def _require_api_key(self) -> str:
        key = self._config.api_key
        if not key:
            raise ConfigurationError(
                f"{self.display_name} requires an API key",
                provider=self.backend_kind,
                model=self.model,
            )
        return key

    async def initialize(self) -> None:
        """Create the client if needed. Safe to call repeatedly."""
        self._ensure_client()

    async def aclose(self) -> None:
        """Close the vendor client (if any) and forget it."""
        client, self._client = self._client, None
        if client is None:
            return
        closer = getattr(client, "aclose", None) or getattr(client, "close", None)
        if closer is None:
            return
        result = closer()
        if inspect.isawaitable(result):
            await result

    # ------------------------------------------------------------------
    # Resilience wrapper

    def _retry_config(self, operation: str) -> RetryConfig:
        return RetryConfig(
            max_attempts=self._config.retry_attempts,
            base_delay_ms=self._config.retry_delay_ms,
            attempt_logger=self._attempt_logger(operation),
        )

    def _attempt_logger(self, operation: str) -> AttemptLogger:
        def _log(*, attempt: int, max_attempts: int, delay: float | None, error: BaseException | None) -> None:
            if error is None and attempt == 1:
                return
            diag = normalize_error(error, self.backend_kind, self.model) if error is not None else None
            normalized_log_event(
                self._logger,
                "retry.attempt",
                self._ctx(operation=operation),
                phase="retry" if error is not None else "recovered",
                attempt=attempt,
                error_code=diag.code.value if diag is not None else None,
                emitted=error is None,
                level=logging.WARNING if error is not None else logging.INFO,
                max_attempts=max_attempts,
                delay_s=delay,
                status_code=diag.status_code if diag is not None else None,
                retryable=diag.retryable if diag is not None else None,
                error=str(error) if error is not None else None,
            )

        return _log

    async def _with_retry(self, fn: Callable[[], Awaitable[T]], operation: str = "generate_text") -> T:
        return await retry_async(fn, self._retry_config(operation))

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self._config.timeout_seconds)

    async def _finalize_generation(
        self,
        completion: Completion,
        *,
        operation: str,
        prompt_text: str,
    ) -> ResponseEnvelope:
        """Update the counter, record usage and build the envelope."""
        usage = completion.usage
        tokens_used = usage.get("total")
        if tokens_used is None and usage.get("prompt") is not None and usage.get("completion") is not None:
            tokens_used = usage["prompt"] + usage["completion"]
        if tokens_used is None:
            tokens_used = self.estimate_tokens(prompt_text) + self.estimate_tokens(completion.content)
        model = completion.model or self.model
        self._token_count += tokens_used
        cost = estimate_cost(self.backend_kind, model, tokens_used, usage.get("prompt"), usage.get("completion"))
        await self._record_usage(
            UsageRecord(
                provider=self.backend_kind,
                model=model or "unknown",
                tokens_used=tokens_used,
                prompt_tokens=usage.get("prompt"),
                completion_tokens=usage.get("completion"),
                operation=operation,
                cost=cost,
            )
        )
        normalized_log_event(
            self._logger,
            "generate.end",
            self._ctx(operation=operation),
            phase="finalize",
            emitted=True,
            tokens={**usage, "total": tokens_used},
            cost=cost,
        )
        metadata = {"provider": self.backend_kind, **completion.metadata}
        if cost is not None:
            metadata["cost"] = cost
        return ResponseEnvelope(
            content=completion.content,
            model=model,
            tokens_used=tokens_used,
            prompt_tokens=usage.get("prompt"),
            completion_tokens=usage.get("completion"),
            finish_reason=completion.finish_reason,
            metadata=metadata,
        )

    async def _record_usage(self, record: UsageRecord) -> None:
        """Hand ``record`` to the recorder; failures are logged, never raised."""
        if self._usage_recorder is None:
            return
        try:
            result = self._usage_recorder.record(record)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            normalized_log_event(
                self._logger,
                "usage.record.failed",
                self._ctx(operation=record.operation),
                phase="accounting",
                error_code=classify_exception(exc).value,
                emitted=False,
                level=logging.WARNING,
                error=str(exc),
            )

    # ------------------------------------------------------------------
    # Vendor hooks

    @abstractmethod
    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        """Issue one generation request."""

    @abstractmethod
    def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        """Return an async generator of text fragments for one request."""

    async def _embed(self, text: str) -> List[float]:
        raise UnsupportedOperationError("generate_embedding", provider=self.backend_kind, model=self.model)

    async def _probe(self) -> None:
        """Minimal live check used by ``validate_config``."""
        await self.initialize()

    async def _list_models_live(self) -> Optional[List[str]]:
        return None

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        return summarization_prompt(request)

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        return code_analysis_prompt(request)

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        return diagram_prompt(request)

    # ------------------------------------------------------------------
    # Capability contract

    async def generate_text(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        *,
        operation: str = "generate_text",
    ) -> ResponseEnvelope:
        self._ensure_client()
        completion = await self._with_retry(
            lambda: self._with_timeout(self._complete(prompt, system_prompt)),
            operation,
        )
        prompt_text = f"{system_prompt}\n{prompt}" if system_prompt else prompt
        return await self._finalize_generation(completion, operation=operation, prompt_text=prompt_text)

    def generate_stream(self, prompt: str, system_prompt: Optional[str] = None) -> TextStream:
        return TextStream(
            self._accounted_stream(prompt, system_prompt),
            provider=self.backend_kind,
            model=self.model,
            logger=self._logger,
        )

    async def _accounted_stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        self._ensure_client()
        parts: List[str] = []
        async with aclosing(self._stream(prompt, system_prompt)) as fragments:
            async for chunk in fragments:
                if not chunk:
                    continue
                parts.append(chunk)
                yield chunk
        prompt_text = f"{system_prompt}\n{prompt}" if system_prompt else prompt
        await self._finalize_generation(
            Completion(content="".join(parts), model=self.model, finish_reason="stop"),
            operation="generate_stream",
            prompt_text=prompt_text,
        )

    async def summarize(self, request: SummarizationRequest) -> ResponseEnvelope:
        prompt, system_prompt = self._summarize_prompt(request)
        return await self.generate_text(prompt, system_prompt, operation="summarize")

    async def analyze_code(self, request: CodeAnalysisRequest) -> ResponseEnvelope:
        prompt, system_prompt = self._code_analysis_prompt(request)
        return await self.generate_text(prompt, system_prompt, operation="analyze_code")

    async def generate_diagram(self, request: DiagramGenerationRequest) -> ResponseEnvelope:
        prompt, system_prompt = self._diagram_prompt(request)
        return await self.generate_text(prompt, system_prompt, operation="generate_diagram")

    async def generate_embedding(self, text: str) -> List[float]:
        self._ensure_client()
        return await self._with_retry(lambda: self._with_timeout(self._embed(text)), "generate_embedding")

    async def validate_config(self) -> bool:
        try:
            await self._probe()
        except Exception as exc:
            normalized_log_event(
                self._logger,
                "validate.failed",
                self._ctx(),
                phase="validate",
                error_code=classify_exception(exc).value,
                emitted=False,
                level=logging.WARNING,
                error=str(exc),
            )
            return False
        return True

    async def get_model_list(self) -> List[str]:
        try:
            live = await self._list_models_live()
        except Exception as exc:
            normalized_log_event(
                self._logger,
                "models.list.failed",
                self._ctx(),
                phase="models",
                error_code=classify_exception(exc).value,
                emitted=False,
                level=logging.WARNING,
                error=str(exc),
            )
            live = None
        if live:
            return list(live)
        if self.static_models:
            return list(self.static_models)
        return [self.model] if self.model else ["default"]

    def estimate_tokens(self, text: str) -> int:
        return estimate_tokens(text)

    def get_token_count(self) -> int:
        return self._token_count

    def reset_token_count(self) -> None:
        self._token_count = 0


__all__ = ["BaseBackendAdapter"]
