"""Unified configuration layer for backends.

Goals
-----
* Centralize defaults (models, base URLs, retry and timeout budgets).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. ``.env`` file (loaded once into the process environment)
    3. Environment variables ``<PREFIX>_API_KEY``, ``<PREFIX>_MODEL``,
       ``<PREFIX>_BASE_URL``
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_backend_settings(kind)``.

Reading configuration files beyond ``.env`` is left to the embedding
application; it can pass whatever it loads as ``overrides``.

Public API
----------
* get_backend_settings(kind, overrides=None) -> dict
* get_model(kind) -> str | None

"""
from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

from .env import env_prefix, is_placeholder, resolve_api_key
from .defaults import (
    ANTHROPIC_DEFAULT_MAX_TOKENS,
    ANTHROPIC_DEFAULT_MODEL,
    COPILOT_DEFAULT_BASE_URL,
    COPILOT_DEFAULT_MODEL,
    COPILOT_DEFAULT_TEMPERATURE,
    GEMINI_DEFAULT_MODEL,
    LITELLM_DEFAULT_BASE_URL,
    LITELLM_DEFAULT_MODEL,
    MOCK_DEFAULT_MODEL,
    OLLAMA_DEFAULT_HOST,
    OLLAMA_DEFAULT_MODEL,
    OPENAI_DEFAULT_MODEL,
    XAI_DEFAULT_BASE_URL,
    XAI_DEFAULT_MODEL,
)


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "openai": {"model": OPENAI_DEFAULT_MODEL},
    "anthropic": {"model": ANTHROPIC_DEFAULT_MODEL, "max_tokens": ANTHROPIC_DEFAULT_MAX_TOKENS},
    "google-gemini": {"model": GEMINI_DEFAULT_MODEL},
    "github-copilot": {
        "model": COPILOT_DEFAULT_MODEL,
        "base_url": COPILOT_DEFAULT_BASE_URL,
        "temperature": COPILOT_DEFAULT_TEMPERATURE,
    },
    "ollama": {"model": OLLAMA_DEFAULT_MODEL, "base_url": OLLAMA_DEFAULT_HOST},
    "litellm": {"model": LITELLM_DEFAULT_MODEL, "base_url": LITELLM_DEFAULT_BASE_URL},
    "grok": {"model": XAI_DEFAULT_MODEL, "base_url": XAI_DEFAULT_BASE_URL},
    "mock": {"model": MOCK_DEFAULT_MODEL},
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "base_url": "BASE_URL",
}


_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Lightweight .env loader (no external dependency).

    Parses KEY=VALUE lines, ignoring comments and blank lines. Safe to call
    multiple times. Existing environment variables win unless their value
    looks like a placeholder. ``DOTENV_FILE`` selects another file.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    try:
        if not os.path.isfile(path):
            return
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                if k.startswith("export "):
                    k = k[len("export "):].strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _env_overrides(kind: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = env_prefix(kind)
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val:
            out[field] = val
    key, _ = resolve_api_key(kind)
    if key:
        out["api_key"] = key
    return out


def get_backend_settings(kind: Any, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Return merged settings for a backend kind.

    Merge order (later wins): defaults -> .env -> environment -> overrides.
    ``None`` values in ``overrides`` are ignored so they never erase a
    default. Unknown kinds get no defaults but still read ``<KIND>_*``
    variables.
    """
    _load_dotenv_once()
    name = str(getattr(kind, "value", kind) or "").strip().lower()
    cfg: Dict[str, Any] = dict(DEFAULTS.get(name, {}))
    cfg |= _env_overrides(name)
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def get_model(kind: Any) -> Optional[str]:
    return get_backend_settings(kind).get("model")


__all__ = [
    "DEFAULTS",
    "get_backend_settings",
    "get_model",
]
