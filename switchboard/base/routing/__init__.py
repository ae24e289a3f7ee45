"""Manager-level routing: configuration and fallback dispatch."""
from __future__ import annotations

from .manager import BackendManager
from .manager_config import ManagerConfig

__all__ = ["BackendManager", "ManagerConfig"]
