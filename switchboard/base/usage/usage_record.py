"""
Usage record entity handed to the accounting collaborator.

One record is appended per successful generation; records are never updated
or deleted.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UsageRecord:
    """Token usage of one successful backend call.

    Attributes:
        provider: Backend kind that served the call.
        model: Resolved model identifier (``"unknown"`` when none is known).
        tokens_used: Total tokens, reported or estimated.
        prompt_tokens: Prompt-side tokens when reported.
        completion_tokens: Completion-side tokens when reported.
        operation: Logical operation (``"generate_text"``, ``"summarize"``...).
        cost: Estimated cost in USD when a price table entry exists.
        timestamp: UTC creation time.
        session_id: Optional caller-provided grouping key.
    """

    provider: str
    model: str
    tokens_used: int
    operation: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    cost: Optional[float] = None
    timestamp: datetime = field(default_factory=_utcnow)
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


__all__ = ["UsageRecord"]
