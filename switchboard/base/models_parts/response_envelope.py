"""
Uniform generation result.

Every non-streaming text operation (generate_text, summarize, analyze_code,
generate_diagram) returns a :class:`ResponseEnvelope`. Token counts are
optional because not every backend reports them. Envelopes are produced fresh
per call and are frozen; ``metadata`` is exposed as a read-only mapping.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class ResponseEnvelope:
    """Result of a single generation call.

    Attributes:
        content: Generated text.
        model: Model identifier the backend resolved for the call.
        tokens_used: Total tokens, reported or estimated.
        prompt_tokens: Prompt-side tokens when the backend reports them.
        completion_tokens: Completion-side tokens when reported.
        finish_reason: Backend stop reason (``"stop"``, ``"length"``...).
        metadata: Free-form, JSON-serializable diagnostics (read-only).
    """

    content: str
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    finish_reason: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # copy so the caller's dict cannot alter the envelope afterwards
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["metadata"] = dict(self.metadata)
        return data


__all__ = ["ResponseEnvelope"]
