"""In-memory usage accounting collaborator.

Append-only reference implementation of :class:`UsageRecorder`. Suitable for
development, tests and short-lived processes; durable storage of usage is
left to the embedding application.

Thread safety: not thread-safe. A single event loop appending from many
tasks is fine because ``record`` never suspends.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from .usage_record import UsageRecord


class InMemoryUsageLog:
    """Collects :class:`UsageRecord` objects and answers summary queries."""

    def __init__(self) -> None:
        self._records: List[UsageRecord] = []

    def record(self, record: UsageRecord) -> None:
        self._records.append(record)

    def records(
        self,
        *,
        provider: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> List[UsageRecord]:
        """Return a copy of the stored records, optionally filtered."""
        out = list(self._records)
        if provider is not None:
            out = [r for r in out if r.provider == provider]
        if since is not None:
            out = [r for r in out if r.timestamp >= since]
        return out

    def total_tokens(self, provider: Optional[str] = None) -> int:
        return sum(r.tokens_used for r in self.records(provider=provider))

    def total_cost(self, provider: Optional[str] = None) -> float:
        return sum(r.cost or 0.0 for r in self.records(provider=provider))

    def summary(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        """Aggregate tokens and cost overall and per provider, model and operation.

        Returns a mapping with ``total_tokens``, ``total_cost``, ``calls`` and
        three breakdowns (``by_provider``, ``by_model``, ``by_operation``), each
        mapping a key to ``{"tokens", "cost", "calls"}``.
        """
        selected = self.records(since=since)
        breakdowns: Dict[str, Dict[str, Dict[str, Any]]] = {
            "by_provider": defaultdict(_bucket),
            "by_model": defaultdict(_bucket),
            "by_operation": defaultdict(_bucket),
        }
        for rec in selected:
            for name, key in (
                ("by_provider", rec.provider),
                ("by_model", rec.model),
                ("by_operation", rec.operation),
            ):
                bucket = breakdowns[name][key]
                bucket["tokens"] += rec.tokens_used
                bucket["cost"] += rec.cost or 0.0
                bucket["calls"] += 1
        return {
            "total_tokens": sum(r.tokens_used for r in selected),
            "total_cost": sum(r.cost or 0.0 for r in selected),
            "calls": len(selected),
            **{name: dict(values) for name, values in breakdowns.items()},
        }

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


def _bucket() -> Dict[str, Any]:
    return {"tokens": 0, "cost": 0.0, "calls": 0}


__all__ = ["InMemoryUsageLog"]
