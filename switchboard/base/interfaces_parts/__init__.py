"""Interface parts: one Protocol per module, re-exported by base.interfaces."""

from .backend_adapter import BackendAdapter
from .usage_recorder import UsageRecorder

__all__ = ["BackendAdapter", "UsageRecorder"]
