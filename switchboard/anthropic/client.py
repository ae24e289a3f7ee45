"""Anthropic Claude backend adapter.

This module implements the Anthropic integration using the async Messages API
(``AsyncAnthropic.messages.create``) for single-shot requests and
``messages.stream`` for streaming.

Key behaviors:
* The SDK's own retries are disabled (``max_retries=0``); the shared
  resilience wrapper owns the retry budget.
* Text blocks of a response are joined with newlines; non-text blocks are
  ignored.
* Token usage comes from ``usage.input_tokens`` / ``usage.output_tokens``.
* Claude has no embedding endpoint: ``generate_embedding`` raises
  :class:`UnsupportedOperationError`.
* ``validate_config`` sends a ten-token request to the smallest Claude model.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, List, Optional

from anthropic import AsyncAnthropic

from ..base.adapter import BaseBackendAdapter
from ..base.models import (
    BackendKind,
    CodeAnalysisRequest,
    Completion,
    DiagramGenerationRequest,
    SummarizationRequest,
)
from ..base.prompts import PromptPair, fenced
from ..base.tokens import extract_anthropic_token_usage
from ..config.defaults import (
    ANTHROPIC_DEFAULT_MAX_TOKENS,
    ANTHROPIC_DEFAULT_MODEL,
    ANTHROPIC_PROBE_MODEL,
    DEFAULT_TEMPERATURE,
)

__all__ = ["AnthropicBackend"]

_ANALYSIS_INSTRUCTIONS = {
    "summary": "Explain what this code does in detail",
    "review": "Review this code for bugs, improvements, and best practices",
    "documentation": "Generate comprehensive documentation for this code",
    "complexity": "Analyze the time and space complexity of this code",
    "security": "Check for security vulnerabilities and issues",
}


class AnthropicBackend(BaseBackendAdapter):
    """Claude models through ``anthropic.AsyncAnthropic``."""

    backend_kind = BackendKind.ANTHROPIC.value
    display_name = "Anthropic Claude"
    default_model = ANTHROPIC_DEFAULT_MODEL
    static_models = (
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
        "claude-2.1",
        "claude-2.0",
        "claude-instant-1.2",
    )

    def _create_client(self) -> AsyncAnthropic:
        return AsyncAnthropic(
            api_key=self._require_api_key(),
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            max_retries=0,
            default_headers=dict(self._config.custom_headers) or None,
        )

    def _request_params(self, prompt: str, system_prompt: Optional[str]) -> Dict[str, Any]:
        cfg = self._config
        params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": cfg.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            "top_p": cfg.top_p,
            "top_k": cfg.top_k,
            "system": system_prompt or None,
            "stop_sequences": list(cfg.stop_sequences) or None,
        }
        return {k: v for k, v in params.items() if v is not None}

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        client = self._ensure_client()
        response = await client.messages.create(**self._request_params(prompt, system_prompt))
        texts: List[str] = [
            block.text for block in response.content or [] if getattr(block, "type", None) == "text"
        ]
        return Completion(
            content="\n".join(texts),
            model=getattr(response, "model", None),
            usage=extract_anthropic_token_usage(response),
            finish_reason=getattr(response, "stop_reason", None),
            metadata={"response_id": getattr(response, "id", None)},
        )

    async def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        client = self._ensure_client()
        async with client.messages.stream(**self._request_params(prompt, system_prompt)) as stream:
            async for text in stream.text_stream:
                if text:
                    yield text

    async def _probe(self) -> None:
        client = self._ensure_client()
        await self._with_timeout(
            client.messages.create(
                model=ANTHROPIC_PROBE_MODEL,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hi"}],
            )
        )

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        system = f"You are an expert at summarization. Provide a {request.style} summary."
        if request.max_length:
            system += f" Keep it under {request.max_length} words."
        prompt = f"Summarize the following content:\n\n{request.content}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        system = f"You are Claude, an expert {request.language} developer and code reviewer."
        prompt = f"{_ANALYSIS_INSTRUCTIONS[request.analysis_type]}:\n\n{fenced(request.code, request.language)}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        system = "You are an expert at creating technical diagrams. Generate clean, valid diagram code."
        prompt = (
            f"Generate a {request.type} diagram in {request.format} format for: {request.description}. "
            "Return only the diagram code without any explanation or markdown formatting."
        )
        return prompt, system
