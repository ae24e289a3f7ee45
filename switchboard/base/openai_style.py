"""Reusable base for backends exposing an OpenAI-compatible Chat Completions API.

Purpose:
- Share the request shaping and response normalization used by OpenAI,
  GitHub Copilot (API access), xAI Grok and the LiteLLM proxy.

External dependencies:
- ``openai`` (``AsyncOpenAI``). The SDK's own retry loop is disabled
  (``max_retries=0``) so the resilience wrapper owns the retry budget.

Timeout strategy:
- ``config.timeout_ms`` is passed to the SDK client and additionally bounds
  each non-streaming attempt in :class:`BaseBackendAdapter`.

Streaming:
- ``_stream`` opens an SSE stream and always closes it in ``finally``, so a
  caller that stops early releases the HTTP connection.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, ClassVar, Dict, List, Optional

from openai import AsyncOpenAI

from .adapter import BaseBackendAdapter
from .errors import UnsupportedOperationError
from .models import Completion
from .tokens import extract_openai_token_usage


class OpenAIStyleAdapter(BaseBackendAdapter):
    """Adapter base built on ``openai.AsyncOpenAI``.

    Subclasses set ``backend_kind``, ``display_name``, ``default_model`` and
    optionally ``default_base_url`` / ``embedding_model``; override
    ``_resolve_api_key`` or ``_default_headers`` when credentials or headers
    differ from plain OpenAI.
    """

    default_base_url: ClassVar[Optional[str]] = None
    embedding_model: ClassVar[Optional[str]] = None
    default_max_tokens: ClassVar[int] = 2000
    default_temperature: ClassVar[float] = 0.7

    def _resolve_api_key(self) -> str:
        return self._require_api_key()

    def _default_headers(self) -> Dict[str, str]:
        return dict(self._config.custom_headers)

    def _base_url(self) -> Optional[str]:
        return self._config.base_url or self.default_base_url

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._resolve_api_key(),
            base_url=self._base_url(),
            organization=self._config.organization_id,
            project=self._config.project_id,
            timeout=self._config.timeout_seconds,
            max_retries=0,
            default_headers=self._default_headers() or None,
        )

    @staticmethod
    def _messages(prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _request_params(self) -> Dict[str, Any]:
        cfg = self._config
        params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": cfg.max_tokens or self.default_max_tokens,
            "temperature": cfg.temperature if cfg.temperature is not None else self.default_temperature,
            "top_p": cfg.top_p,
            "frequency_penalty": cfg.frequency_penalty,
            "presence_penalty": cfg.presence_penalty,
            "stop": list(cfg.stop_sequences) or None,
        }
        return {k: v for k, v in params.items() if v is not None}

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        client = self._ensure_client()
        response = await client.chat.completions.create(
            messages=self._messages(prompt, system_prompt),
            **self._request_params(),
        )
        choice = response.choices[0] if response.choices else None
        content = (choice.message.content if choice and choice.message else None) or ""
        return Completion(
            content=content,
            model=getattr(response, "model", None),
            usage=extract_openai_token_usage(response),
            finish_reason=getattr(choice, "finish_reason", None),
            metadata={"response_id": getattr(response, "id", None)},
        )

    async def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        client = self._ensure_client()
        stream = await client.chat.completions.create(
            messages=self._messages(prompt, system_prompt),
            stream=True,
            **self._request_params(),
        )
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                text = getattr(delta, "content", None) if delta is not None else None
                if text:
                    yield text
        finally:
            await stream.close()

    async def _embed(self, text: str) -> List[float]:
        if not self.embedding_model:
            raise UnsupportedOperationError("generate_embedding", provider=self.backend_kind, model=self.model)
        client = self._ensure_client()
        response = await client.embeddings.create(model=self.embedding_model, input=text)
        return [float(v) for v in response.data[0].embedding]

    async def _probe(self) -> None:
        client = self._ensure_client()
        page = await self._with_timeout(client.models.list())
        if not getattr(page, "data", None):
            raise RuntimeError(f"{self.display_name} returned no models")


__all__ = ["OpenAIStyleAdapter"]
