"""
Adapter-internal result of one backend call, before accounting.

Adapters return a :class:`Completion` from their vendor hook; the resilience
wrapper turns it into a :class:`ResponseEnvelope` after updating counters and
recording usage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..tokens import PLACEHOLDER_USAGE, CanonicalUsage


@dataclass
class Completion:
    """Vendor-neutral view of a raw completion.

    Attributes:
        content: Generated text.
        model: Model reported by the backend, if any.
        usage: Canonical token mapping (``prompt``/``completion``/``total``).
        finish_reason: Backend stop reason.
        metadata: Adapter-specific diagnostics copied into the envelope.
    """

    content: str
    model: Optional[str] = None
    usage: CanonicalUsage = field(default_factory=lambda: dict(PLACEHOLDER_USAGE))
    finish_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


__all__ = ["Completion"]
