"""Mock backend package exposing a deterministic, network-free adapter."""

from .client import MockBackend, ScriptedFailure

__all__ = ["MockBackend", "ScriptedFailure"]
