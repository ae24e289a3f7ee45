"""Default prompt builders for the convenience operations.

Each builder turns a typed request into a ``(prompt, system_prompt)`` pair
that the adapter passes to ``generate_text``. Adapters that want a different
voice override the corresponding ``_..._prompt`` hook on
:class:`BaseBackendAdapter` instead of reimplementing the operation.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple

from .models import CodeAnalysisRequest, DiagramGenerationRequest, SummarizationRequest

PromptPair = Tuple[str, Optional[str]]

ANALYSIS_INSTRUCTIONS: Dict[str, str] = {
    "summary": "Provide a concise summary of what this code does",
    "review": "Review this code for best practices, potential issues, and improvements",
    "documentation": "Generate comprehensive documentation for this code",
    "complexity": "Analyze the complexity and suggest simplifications",
    "security": "Analyze this code for security vulnerabilities",
}


def fenced(code: str, language: str) -> str:
    return f"```{language}\n{code}\n```"


def summarization_prompt(request: SummarizationRequest) -> PromptPair:
    system = f"You are a technical documentation expert. Provide a {request.style} summary."
    if request.max_length:
        system += f" Keep it under {request.max_length} words."
    if request.language:
        system += f" Write the summary in {request.language}."
    prompt = f"Summarize the following content:\n\n{request.content}\n\nContext: {request.context or 'None'}"
    return prompt, system


def code_analysis_prompt(request: CodeAnalysisRequest) -> PromptPair:
    system = f"You are a code analysis expert specializing in {request.language}."
    prompt = f"{ANALYSIS_INSTRUCTIONS[request.analysis_type]}:\n\n{fenced(request.code, request.language)}"
    if request.context:
        prompt += f"\n\nContext: {request.context}"
    return prompt, system


def diagram_prompt(request: DiagramGenerationRequest) -> PromptPair:
    system = (
        f"Generate a {request.format} diagram based on the description. "
        f"Return only valid {request.format} syntax."
    )
    prompt = f"Create a {request.type} diagram for: {request.description}"
    return prompt, system


__all__ = [
    "PromptPair",
    "ANALYSIS_INSTRUCTIONS",
    "fenced",
    "summarization_prompt",
    "code_analysis_prompt",
    "diagram_prompt",
]
