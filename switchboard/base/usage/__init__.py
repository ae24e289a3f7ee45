"""Usage accounting: the record entity and an in-memory collaborator."""

from .usage_record import UsageRecord
from .in_memory_log import InMemoryUsageLog

__all__ = ["UsageRecord", "InMemoryUsageLog"]
