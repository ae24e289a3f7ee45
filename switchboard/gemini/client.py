"""Google Gemini backend adapter.

Purpose:
- Generation, streaming and embeddings against Gemini through the async
  surface of the ``google-genai`` SDK (``genai.Client(...).aio``).

External dependencies:
- ``google-genai``. The deprecated ``google-generativeai`` package is not
  used.

Notes:
- The system prompt is sent as ``system_instruction`` rather than being
  concatenated into the user prompt.
- Token usage is read from ``usage_metadata``; missing counts fall back to
  the shared character-length estimate.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, List, Optional

from google import genai
from google.genai import types

from ..base.adapter import BaseBackendAdapter
from ..base.errors import classify_exception
from ..base.logging import normalized_log_event
from ..base.models import (
    BackendKind,
    CodeAnalysisRequest,
    Completion,
    DiagramGenerationRequest,
    SummarizationRequest,
)
from ..base.prompts import PromptPair, fenced
from ..base.tokens import extract_gemini_token_usage
from ..config.defaults import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, GEMINI_DEFAULT_MODEL, GEMINI_EMBEDDING_MODEL

__all__ = ["GeminiBackend"]


def _finish_reason(response: Any) -> Optional[str]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return str(getattr(reason, "name", reason)).lower()


class GeminiBackend(BaseBackendAdapter):
    """Gemini 2.0 / 1.5 models."""

    backend_kind = BackendKind.GOOGLE_GEMINI.value
    display_name = "Google Gemini"
    default_model = GEMINI_DEFAULT_MODEL
    static_models = (
        "gemini-2.0-flash-exp",
        "gemini-2.0-flash-001",
        "gemini-1.5-pro-latest",
        "gemini-1.5-pro-001",
        "gemini-1.5-flash-latest",
        "gemini-1.5-flash-001",
        "gemini-1.5-flash-8b-latest",
        "gemini-1.5-flash-8b-001",
        "gemini-1.0-pro-latest",
        "gemini-1.0-pro-001",
    )

    def _create_client(self) -> Any:
        http_options = types.HttpOptions(
            timeout=self._config.timeout_ms,
            base_url=self._config.base_url,
            headers=dict(self._config.custom_headers) or None,
        )
        return genai.Client(api_key=self._require_api_key(), http_options=http_options).aio

    def _generation_config(self, system_prompt: Optional[str]) -> types.GenerateContentConfig:
        cfg = self._config
        return types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            top_p=cfg.top_p,
            top_k=cfg.top_k,
            max_output_tokens=cfg.max_tokens or DEFAULT_MAX_TOKENS,
            stop_sequences=list(cfg.stop_sequences) or None,
        )

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        client = self._ensure_client()
        response = await client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._generation_config(system_prompt),
        )
        return Completion(
            content=response.text or "",
            model=getattr(response, "model_version", None) or self.model,
            usage=extract_gemini_token_usage(response),
            finish_reason=_finish_reason(response),
        )

    async def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        client = self._ensure_client()
        chunks = await client.models.generate_content_stream(
            model=self.model,
            contents=prompt,
            config=self._generation_config(system_prompt),
        )
        try:
            async for chunk in chunks:
                text = getattr(chunk, "text", None)
                if text:
                    yield text
        finally:
            closer = getattr(chunks, "aclose", None)
            if closer is not None:
                await closer()

    async def _embed(self, text: str) -> List[float]:
        client = self._ensure_client()
        response = await client.models.embed_content(model=GEMINI_EMBEDDING_MODEL, contents=text)
        return [float(v) for v in response.embeddings[0].values]

    async def _probe(self) -> None:
        client = self._ensure_client()
        await self._with_timeout(client.models.get(model=self.model))

    async def _list_models_live(self) -> Optional[List[str]]:
        client = self._ensure_client()
        pager = await self._with_timeout(client.models.list())
        names: List[str] = []
        async for model in pager:
            name = getattr(model, "name", None) or ""
            actions = getattr(model, "supported_actions", None) or []
            if name and (not actions or "generateContent" in actions):
                names.append(name.removeprefix("models/"))
        return names or None

    async def test_connection(self) -> bool:
        """Send a tiny generation request; ``False`` on any failure."""
        try:
            envelope = await self.generate_text("Test connection", operation="test_connection")
        except Exception as exc:
            normalized_log_event(
                self._logger,
                "validate.failed",
                self._ctx(operation="test_connection"),
                phase="validate",
                error_code=classify_exception(exc).value,
                emitted=False,
                level=logging.WARNING,
                error=str(exc),
            )
            return False
        return bool(envelope.content)

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        system = (
            "You are a helpful assistant that creates concise, accurate summaries.\n"
            f"Style: {request.style}\n"
            f"Max length: {request.max_length or 500} words\n"
            f"Language: {request.language or 'English'}"
        )
        prompt = f"Please summarize the following content:\n\n{request.content}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        system = (
            f"You are an expert code analyzer. Provide {request.analysis_type} analysis "
            f"for {request.language} code."
        )
        prompt = f"Analyze this {request.language} code:\n\n{fenced(request.code, request.language)}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        system = (
            f"Generate a {request.format} {request.type} diagram based on the description. "
            "Return only the diagram code without explanations."
        )
        prompt = f"Create a {request.type} diagram in {request.format} format for: {request.description}"
        return prompt, system
