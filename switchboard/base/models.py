"""Backend-agnostic data models public surface.

Re-exports the one-type-per-file implementations under
``switchboard.base.models_parts``.
"""
from __future__ import annotations

from .models_parts import (
    ALL_BACKENDS,
    CLOUD_BACKENDS,
    CODE_SPECIALIZED_BACKENDS,
    LOCAL_BACKENDS,
    BackendConfig,
    BackendInfo,
    BackendKind,
    CodeAnalysisRequest,
    DiagramGenerationRequest,
    ResponseEnvelope,
    Completion,
    SummarizationRequest,
    kind_value,
)

__all__ = [
    "BackendKind",
    "ALL_BACKENDS",
    "CLOUD_BACKENDS",
    "LOCAL_BACKENDS",
    "CODE_SPECIALIZED_BACKENDS",
    "kind_value",
    "BackendConfig",
    "BackendInfo",
    "SummarizationRequest",
    "CodeAnalysisRequest",
    "DiagramGenerationRequest",
    "ResponseEnvelope",
    "Completion",
]
