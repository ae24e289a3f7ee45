"""GitHub Copilot backend adapter (API access).

Purpose:
- Talk to the OpenAI-compatible Copilot endpoint
  (``https://api.githubcopilot.com`` by default) with a Copilot API key or a
  GitHub token.

Credentials:
- ``config.api_key`` wins, then ``config.github_token``. Neither present is a
  :class:`ConfigurationError` raised when the client is first created.

Notes:
- Editor-hosted language model access is not part of this adapter; only the
  HTTP API is supported.
- Prompts use a code-review voice with a low default temperature.
"""

from __future__ import annotations

from typing import Dict

from ..base.errors import ConfigurationError
from ..base.models import BackendKind, CodeAnalysisRequest, DiagramGenerationRequest, SummarizationRequest
from ..base.openai_style import OpenAIStyleAdapter
from ..base.prompts import ANALYSIS_INSTRUCTIONS, PromptPair, fenced
from ..config.defaults import (
    COPILOT_DEFAULT_BASE_URL,
    COPILOT_DEFAULT_MODEL,
    COPILOT_DEFAULT_TEMPERATURE,
    OPENAI_EMBEDDING_MODEL,
)

__all__ = ["CopilotBackend"]

_USER_AGENT = "switchboard-copilot/0.1"


class CopilotBackend(OpenAIStyleAdapter):
    """GitHub Copilot chat models, specialized for code tasks."""

    backend_kind = BackendKind.GITHUB_COPILOT.value
    display_name = "GitHub Copilot"
    default_model = COPILOT_DEFAULT_MODEL
    default_base_url = COPILOT_DEFAULT_BASE_URL
    default_temperature = COPILOT_DEFAULT_TEMPERATURE
    embedding_model = OPENAI_EMBEDDING_MODEL
    static_models = (
        "gpt-4",
        "gpt-4-turbo",
        "gpt-3.5-turbo",
        "codex-davinci-002",
        "code-davinci-002",
    )

    def _resolve_api_key(self) -> str:
        key = self._config.api_key or self._config.github_token
        if not key:
            raise ConfigurationError(
                "GitHub Copilot API requires either API key or GitHub token",
                provider=self.backend_kind,
                model=self.model,
            )
        return key

    def _default_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}
        headers.update(self._config.custom_headers)
        return headers

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        system = (
            "You are GitHub Copilot, helping developers understand code and documentation. "
            f"Provide a {request.style} summary."
        )
        if request.max_length:
            system += f" Keep it under {request.max_length} words."
        prompt = f"Summarize the following:\n\n{request.content}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        system = (
            f"You are GitHub Copilot, an expert {request.language} programmer. "
            "Give precise, actionable answers grounded in the code shown."
        )
        prompt = f"{ANALYSIS_INSTRUCTIONS[request.analysis_type]}:\n\n{fenced(request.code, request.language)}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        system = (
            f"You are GitHub Copilot. Generate {request.format} diagram code. "
            f"Return only valid {request.format} syntax without explanations."
        )
        prompt = f"Create a {request.type} diagram for: {request.description}"
        return prompt, system

    async def generate_code_suggestion(self, code_prefix: str, language: str) -> str:
        """Return a completion continuing ``code_prefix``."""
        envelope = await self.generate_text(
            f"Complete the following {language} code:\n\n{fenced(code_prefix, language)}",
            f"You are GitHub Copilot. Continue the {language} code. Return only code.",
            operation="code_suggestion",
        )
        return envelope.content
