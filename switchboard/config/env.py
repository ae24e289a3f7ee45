"""switchboard.config.env
======================

Environment variable naming for backend settings.

Purpose
-------
- Map each backend kind to the prefix of its environment variables
  (``<PREFIX>_API_KEY``, ``<PREFIX>_MODEL``, ``<PREFIX>_BASE_URL``).
- Accept historical aliases for credentials (``GOOGLE_API_KEY`` for Gemini,
  ``GITHUB_TOKEN`` for Copilot) after the canonical name.

Failure Modes
-------------
Helpers never raise on unknown kinds or unset variables; they return ``None``
and let the caller decide (the adapter raises ``ConfigurationError`` when a
required credential is still missing).
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

ENV_PREFIX: Dict[str, str] = {
    "openai": "OPENAI",
    "anthropic": "ANTHROPIC",
    "google-gemini": "GEMINI",
    "github-copilot": "GITHUB_COPILOT",
    "ollama": "OLLAMA",
    "litellm": "LITELLM",
    "grok": "XAI",
    "mock": "SWITCHBOARD_MOCK",
}

# Backend kind -> ordered API key variable names (canonical first)
ENV_KEY_ALIASES: Dict[str, Tuple[str, ...]] = {
    "google-gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "github-copilot": ("GITHUB_COPILOT_API_KEY", "GITHUB_TOKEN"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the value looks like a placeholder rather than a secret.

    Heuristics (case-insensitive): contains 'placeholder', 'changeme' or
    'example', or starts with 'test_'.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("test_")


def env_prefix(kind: str) -> str:
    """Return the variable prefix for ``kind`` (derived from the kind when unmapped)."""
    k = (kind or "").strip().lower()
    return ENV_PREFIX.get(k) or k.upper().replace("-", "_")


def api_key_candidates(kind: str) -> Iterable[str]:
    """Yield API key variable names for ``kind`` in priority order."""
    k = (kind or "").strip().lower()
    canonical = f"{env_prefix(k)}_API_KEY"
    yield canonical
    for alias in ENV_KEY_ALIASES.get(k, ()):
        if alias != canonical:
            yield alias


def resolve_api_key(kind: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` of the first real key, else ``(None, None)``.

    Empty and placeholder values are skipped, so an alias still resolves when
    the canonical variable holds a template value.
    """
    for name in api_key_candidates(kind):
        val = os.environ.get(name)
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_PREFIX",
    "ENV_KEY_ALIASES",
    "is_placeholder",
    "env_prefix",
    "api_key_candidates",
    "resolve_api_key",
]
