"""Structural interfaces public surface."""

from .interfaces_parts import BackendAdapter, UsageRecorder

__all__ = ["BackendAdapter", "UsageRecorder"]
