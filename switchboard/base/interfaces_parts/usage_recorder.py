"""UsageRecorder Protocol (single-class module).

The accounting collaborator receives one :class:`UsageRecord` per successful
generation. ``record`` may be a plain function or a coroutine function; the
resilience wrapper awaits the result when it is awaitable.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..usage.usage_record import UsageRecord


@runtime_checkable
class UsageRecorder(Protocol):
    """Best-effort sink for usage records.

    Failures raised here are logged by the caller and never fail the
    generation that produced the record.
    """

    def record(self, record: UsageRecord) -> Any:
        ...
