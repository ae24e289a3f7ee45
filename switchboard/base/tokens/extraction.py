"""Token usage extraction helpers.

Converts each vendor's usage shape into the canonical mapping used by the
resilience wrapper and structured logging:

    {"prompt": <int|None>, "completion": <int|None>, "total": <int|None>}

Design Principles
-----------------
1. Non-intrusive: a response without usage yields the all-``None``
   placeholder instead of raising.
2. Defensive coercion: values go through ``int``; invalid or negative values
   become ``None``.
3. Derived total: a missing ``total`` is the sum of ``prompt`` and
   ``completion`` only when both are present.

Supported shapes
----------------
OpenAI-compatible (OpenAI, Grok, Copilot, LiteLLM):
    ``usage.prompt_tokens`` / ``usage.completion_tokens`` / ``usage.total_tokens``
Anthropic:
    ``usage.input_tokens`` / ``usage.output_tokens``
Gemini:
    ``usage_metadata.prompt_token_count`` / ``candidates_token_count`` /
    ``total_token_count``
Ollama:
    top-level ``prompt_eval_count`` / ``eval_count``

Every helper accepts SDK objects and plain mappings alike and never raises.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

CanonicalUsage = Dict[str, Optional[int]]

PLACEHOLDER_USAGE: CanonicalUsage = {"prompt": None, "completion": None, "total": None}


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        iv = int(value)
    except (TypeError, ValueError):
        return None
    return iv if iv >= 0 else None


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _finalize_usage(prompt: Optional[int], completion: Optional[int], total: Optional[int]) -> CanonicalUsage:
    if total is None and prompt is not None and completion is not None:
        total = prompt + completion
    return {"prompt": prompt, "completion": completion, "total": total}


def _extract(usage_obj: Any, prompt_key: str, completion_key: str, total_key: str) -> CanonicalUsage:
    if usage_obj is None:
        return PLACEHOLDER_USAGE.copy()
    return _finalize_usage(
        _coerce_int(_field(usage_obj, prompt_key)),
        _coerce_int(_field(usage_obj, completion_key)),
        _coerce_int(_field(usage_obj, total_key)),
    )


def extract_openai_token_usage(raw_response: Any) -> CanonicalUsage:
    """Map an OpenAI-compatible ``usage`` block (chat completions) to canonical form."""
    return _extract(_field(raw_response, "usage"), "prompt_tokens", "completion_tokens", "total_tokens")


def extract_anthropic_token_usage(raw_response: Any) -> CanonicalUsage:
    """Map Anthropic ``usage.input_tokens`` / ``output_tokens`` to canonical form."""
    return _extract(_field(raw_response, "usage"), "input_tokens", "output_tokens", "total_tokens")


def extract_gemini_token_usage(raw_response: Any) -> CanonicalUsage:
    """Map Gemini ``usage_metadata`` counters to canonical form."""
    return _extract(
        _field(raw_response, "usage_metadata"),
        "prompt_token_count",
        "candidates_token_count",
        "total_token_count",
    )


def extract_ollama_token_usage(raw_response: Any) -> CanonicalUsage:
    """Map Ollama's top-level ``prompt_eval_count`` / ``eval_count`` to canonical form."""
    return _extract(raw_response, "prompt_eval_count", "eval_count", "total_tokens")


def estimate_tokens(text: Optional[str]) -> int:
    """Approximate token count: one token per four characters, rounded up."""
    if not text:
        return 0
    return math.ceil(len(text) / 4)


__all__ = [
    "CanonicalUsage",
    "PLACEHOLDER_USAGE",
    "extract_openai_token_usage",
    "extract_anthropic_token_usage",
    "extract_gemini_token_usage",
    "extract_ollama_token_usage",
    "estimate_tokens",
]
