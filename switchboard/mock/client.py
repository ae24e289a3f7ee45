"""Deterministic mock backend for offline runs and tests.

Purpose
-------
Implement the full capability contract without any network traffic so the
manager, the resilience wrapper and accounting can be exercised end to end.
Behaviour is scripted through ``BackendConfig.extra``:

``responses``
    Mapping of prompt to reply. A value is either a string or a mapping with
    ``text`` and optional ``usage`` (``prompt`` / ``completion`` / ``total``).
    Lookup order: exact prompt, lower-cased prompt, ``"*"``, then an echo.
``fail_times`` / ``fail_status`` / ``fail_message``
    The first ``fail_times`` generation calls raise :class:`ScriptedFailure`
    carrying ``fail_status`` (default 503). ``fail_times: -1`` fails forever.
``stream`` / ``stream_error_after``
    Explicit fragments for ``generate_stream`` (default: 16-character chunks
    of the reply) and an optional failure after that many fragments.
``supports_embeddings`` / ``embedding`` / ``embedding_dim``
    Embedding capability, a fixed vector, or the size of the deterministic
    hash-derived vector (default 8).
``construct_error`` / ``init_error`` / ``valid`` / ``models`` / ``latency_s``
    Fail at construction (``ConfigurationError``), fail ``initialize``,
    the ``validate_config`` result, the model list and a per-call delay.

External dependencies
---------------------
Standard library only.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from ..base.adapter import BaseBackendAdapter
from ..base.errors import ConfigurationError, UnsupportedOperationError
from ..base.interfaces import UsageRecorder
from ..base.models import BackendConfig, BackendKind, Completion
from ..config.defaults import MOCK_DEFAULT_MODEL

__all__ = ["MockBackend", "ScriptedFailure"]


class ScriptedFailure(Exception):
    """Failure raised on purpose; ``status_code`` drives retry classification."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class _MockClient:
    """Stand-in for a vendor client so lifecycle code paths run unchanged."""

    closed: bool = False

    async def aclose(self) -> None:
        self.closed = True


class MockBackend(BaseBackendAdapter):
    """Adapter returning scripted replies instead of calling a live API."""

    backend_kind = BackendKind.MOCK.value
    display_name = "Mock"
    default_model = MOCK_DEFAULT_MODEL

    def __init__(
        self,
        config: BackendConfig,
        *,
        usage_recorder: Optional[UsageRecorder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(config, usage_recorder=usage_recorder, logger=logger)
        self._script: Mapping[str, Any] = dict(config.extra)
        if self._script.get("construct_error"):
            raise ConfigurationError(str(self._script["construct_error"]), provider=self.backend_kind)
        self.calls = 0
        self.stream_calls = 0
        self.streams_released = 0
        self.prompts: List[str] = []

    def _create_client(self) -> _MockClient:
        return _MockClient()

    async def initialize(self) -> None:
        await super().initialize()
        if self._script.get("init_error"):
            raise ConnectionError(str(self._script["init_error"]))

    # ------------------------------------------------------------------
    # Script helpers

    def _reply(self, prompt: str) -> Mapping[str, Any]:
        responses: Mapping[str, Any] = self._script.get("responses") or {}
        raw = responses.get(prompt) or responses.get(prompt.lower()) or responses.get("*")
        if raw is None:
            return {"text": f"mock response to: {prompt}"}
        if isinstance(raw, str):
            return {"text": raw}
        return raw

    def _maybe_fail(self) -> None:
        budget = int(self._script.get("fail_times", 0))
        if budget < 0 or self.calls <= budget:
            raise ScriptedFailure(
                str(self._script.get("fail_message", f"{self.backend_kind} scripted failure")),
                status_code=self._script.get("fail_status", 503),
            )

    @staticmethod
    def _chunk_text(text: str, chunk_size: int = 16) -> List[str]:
        return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]

    # ------------------------------------------------------------------
    # Vendor hooks

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        self.calls += 1
        self.prompts.append(prompt)
        await asyncio.sleep(float(self._script.get("latency_s", 0)))
        self._maybe_fail()
        reply = self._reply(prompt)
        usage: Dict[str, Optional[int]] = {"prompt": None, "completion": None, "total": None}
        usage.update(reply.get("usage") or {})
        return Completion(
            content=str(reply.get("text", "")),
            model=self.model,
            usage=usage,
            finish_reason="stop",
            metadata={"mock": True},
        )

    async def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        self.stream_calls += 1
        self.prompts.append(prompt)
        fragments = list(self._script.get("stream") or self._chunk_text(str(self._reply(prompt).get("text", ""))))
        fail_after = self._script.get("stream_error_after")
        try:
            for index, fragment in enumerate(fragments):
                if fail_after is not None and index >= int(fail_after):
                    raise ScriptedFailure(f"{self.backend_kind} stream interrupted", status_code=502)
                await asyncio.sleep(0)
                yield fragment
            if fail_after is not None and len(fragments) <= int(fail_after):
                raise ScriptedFailure(f"{self.backend_kind} stream interrupted", status_code=502)
        finally:
            self.streams_released += 1

    async def _embed(self, text: str) -> List[float]:
        if not self._script.get("supports_embeddings", True):
            raise UnsupportedOperationError("generate_embedding", provider=self.backend_kind, model=self.model)
        self.calls += 1
        fixed = self._script.get("embedding")
        if fixed is not None:
            return [float(v) for v in fixed]
        dim = int(self._script.get("embedding_dim", 8))
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [digest[i % len(digest)] / 255.0 for i in range(dim)]

    async def _probe(self) -> None:
        await self.initialize()
        if not self._script.get("valid", True):
            raise ConnectionError(f"{self.backend_kind} probe rejected")

    async def _list_models_live(self) -> Optional[List[str]]:
        models = self._script.get("models")
        return list(models) if models else None
