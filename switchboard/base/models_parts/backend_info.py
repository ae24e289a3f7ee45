"""
Static registry metadata for a backend kind.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BackendInfo:
    """Display and capability metadata used for listing and routing hints.

    Attributes:
        name: Human-readable display name (prefixes model labels).
        requires_api_key: Whether construction needs a credential.
        supported_features: Feature tags such as ``"text"`` or ``"embeddings"``.
        is_local: Backend runs on the local machine or network.
        is_specialized_for_code: Preferred by ``analyze_code`` without a primary.
        description: One-line description.
    """

    name: str
    requires_api_key: bool
    supported_features: Tuple[str, ...]
    is_local: bool = False
    is_specialized_for_code: bool = False
    description: str = ""

    def supports(self, feature: str) -> bool:
        return feature in self.supported_features


__all__ = ["BackendInfo"]
