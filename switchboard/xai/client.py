"""xAI Grok backend adapter.

Purpose:
- Reach Grok models through the OpenAI-compatible xAI endpoint
  (``https://api.x.ai/v1``) using the shared :class:`OpenAIStyleAdapter`.

Failure modes:
- The API key is checked at construction: a missing key raises
  :class:`ConfigurationError` from the factory, so the manager skips the
  backend instead of failing on first use.
- xAI offers no embedding models; ``generate_embedding`` raises
  :class:`UnsupportedOperationError` and the manager may fall back.

Extras:
- ``generate_with_search``, ``generate_with_reasoning`` and ``code_analysis``
  (the latter pinned to the code-tuned model for the duration of the call).
"""

from __future__ import annotations

import logging
import math
from typing import Literal, Optional

from ..base.interfaces import UsageRecorder
from ..base.logging import normalized_log_event
from ..base.models import (
    BackendConfig,
    BackendKind,
    CodeAnalysisRequest,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
)
from ..base.openai_style import OpenAIStyleAdapter
from ..base.prompts import PromptPair, fenced
from ..config.defaults import XAI_CODE_MODEL, XAI_DEFAULT_BASE_URL, XAI_DEFAULT_MODEL

__all__ = ["GrokBackend"]

ReasoningEffort = Literal["low", "medium", "high"]

_ANALYSIS_INSTRUCTIONS = {
    "summary": "Analyze and explain what this code does, including its purpose, functionality, and key components",
    "review": "Review this code for best practices, potential bugs, performance issues, and suggest improvements",
    "documentation": "Generate comprehensive documentation for this code including usage examples, parameters, and return values",
    "complexity": "Analyze the time and space complexity of this code, identifying bottlenecks and optimization opportunities",
    "security": "Perform a security analysis of this code, identifying vulnerabilities, security risks, and recommended fixes",
}


class GrokBackend(OpenAIStyleAdapter):
    """xAI Grok models with search and reasoning helpers."""

    backend_kind = BackendKind.GROK.value
    display_name = "xAI Grok"
    default_model = XAI_DEFAULT_MODEL
    default_base_url = XAI_DEFAULT_BASE_URL
    embedding_model = None
    static_models = (
        "grok-4",
        "grok-4-fast",
        "grok-3",
        "grok-3-beta",
        "grok-3-mini",
        "grok-3-mini-fast",
        "grok-code-fast-1",
        "grok-2",
        "grok-2-mini",
        "grok-1",
    )

    def __init__(
        self,
        config: BackendConfig,
        *,
        usage_recorder: Optional[UsageRecorder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(config, usage_recorder=usage_recorder, logger=logger)
        self._require_api_key()

    def estimate_tokens(self, text: str) -> int:
        """Grok tokenizes slightly denser than four characters per token."""
        return math.ceil(len(text) / 3.5) if text else 0

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        system = (
            f"You are Grok AI, an expert at creating {request.style} summaries. "
            "Provide clear, concise, and informative summaries."
        )
        prompt = f"Summarize the following content in a {request.style} style:\n\n{request.content}"
        if request.context:
            prompt += f"\n\nAdditional context: {request.context}"
        return prompt, system

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        system = (
            f"You are Grok AI, an expert {request.language} developer with deep knowledge of "
            "software engineering best practices. Provide detailed, actionable insights."
        )
        prompt = f"{_ANALYSIS_INSTRUCTIONS[request.analysis_type]}:\n\n{fenced(request.code, request.language)}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, system

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        system = (
            "You are Grok AI, an expert at creating technical diagrams. Generate clean, "
            f"well-structured {request.format} code that accurately represents the requested diagram."
        )
        prompt = (
            f"Generate a {request.type} diagram in {request.format} format for: {request.description}.\n\n"
            "Requirements:\n"
            f"- Return only the {request.format} code without explanations or markdown formatting\n"
            "- Ensure the diagram is complete and properly structured\n"
            "- Use appropriate styling and layout for clarity"
        )
        return prompt, system

    async def generate_with_search(self, prompt: str, use_search: bool = True) -> ResponseEnvelope:
        system = (
            "You have access to real-time search. Use it to provide up-to-date, accurate information with citations."
            if use_search
            else None
        )
        return await self.generate_text(prompt, system, operation="generate_with_search")

    async def generate_with_reasoning(
        self,
        prompt: str,
        reasoning_effort: Optional[ReasoningEffort] = None,
    ) -> ResponseEnvelope:
        """Ask for an explicit reasoning effort; only the ``mini`` models honour it."""
        if "mini" not in (self.model or ""):
            normalized_log_event(
                self._logger,
                "grok.reasoning.unsupported_model",
                self._ctx(),
                phase="request",
                emitted=False,
                level=logging.WARNING,
            )
        system = (
            f"Use {reasoning_effort} reasoning effort to analyze and respond to this query thoroughly."
            if reasoning_effort
            else None
        )
        return await self.generate_text(prompt, system, operation="generate_with_reasoning")

    async def code_analysis(self, code: str, language: str, task: str = "analyze") -> ResponseEnvelope:
        """Run a free-form code task on the code-tuned Grok model."""
        system = (
            "You are Grok AI, specialized in code analysis and development. "
            "Provide expert-level insights and solutions."
        )
        prompt = f"{task} the following {language} code:\n\n{fenced(code, language)}"
        pin = XAI_CODE_MODEL if XAI_CODE_MODEL in await self.get_model_list() else None
        with self._pinned_model(pin):
            return await self.generate_text(prompt, system, operation="code_analysis")
