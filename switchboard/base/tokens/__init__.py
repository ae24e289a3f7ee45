"""Token accounting helpers (usage extraction and estimation)."""

from .extraction import (
    PLACEHOLDER_USAGE,
    CanonicalUsage,
    estimate_tokens,
    extract_anthropic_token_usage,
    extract_gemini_token_usage,
    extract_ollama_token_usage,
    extract_openai_token_usage,
)

__all__ = [
    "CanonicalUsage",
    "PLACEHOLDER_USAGE",
    "estimate_tokens",
    "extract_openai_token_usage",
    "extract_anthropic_token_usage",
    "extract_gemini_token_usage",
    "extract_ollama_token_usage",
]
