"""
Backend kind enumeration and category tuples.

A backend kind is the registry key that maps a :class:`BackendConfig` to its
adapter class. Values are the wire identifiers callers use in configuration.
"""
from __future__ import annotations

from enum import Enum
from typing import Tuple


class BackendKind(str, Enum):
    """Identifiers of every backend the factory knows how to build."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE_GEMINI = "google-gemini"
    GITHUB_COPILOT = "github-copilot"
    OLLAMA = "ollama"
    LITELLM = "litellm"
    GROK = "grok"
    MOCK = "mock"


ALL_BACKENDS: Tuple[BackendKind, ...] = tuple(BackendKind)

CLOUD_BACKENDS: Tuple[BackendKind, ...] = (
    BackendKind.OPENAI,
    BackendKind.ANTHROPIC,
    BackendKind.GOOGLE_GEMINI,
    BackendKind.GITHUB_COPILOT,
    BackendKind.GROK,
)

LOCAL_BACKENDS: Tuple[BackendKind, ...] = (
    BackendKind.OLLAMA,
    BackendKind.LITELLM,
)

CODE_SPECIALIZED_BACKENDS: Tuple[BackendKind, ...] = (
    BackendKind.GITHUB_COPILOT,
    BackendKind.GROK,
)


def kind_value(kind: "BackendKind | str") -> str:
    """Return the canonical lowercase identifier for ``kind``."""
    raw = kind.value if isinstance(kind, BackendKind) else str(kind)
    return raw.strip().lower()


__all__ = [
    "BackendKind",
    "ALL_BACKENDS",
    "CLOUD_BACKENDS",
    "LOCAL_BACKENDS",
    "CODE_SPECIALIZED_BACKENDS",
    "kind_value",
]
