"""Model parts package: one data type per module, re-exported here."""

from .backend_kind import (
    ALL_BACKENDS,
    CLOUD_BACKENDS,
    CODE_SPECIALIZED_BACKENDS,
    LOCAL_BACKENDS,
    BackendKind,
    kind_value,
)
from .backend_config import BackendConfig
from .backend_info import BackendInfo
from .request_models import CodeAnalysisRequest, DiagramGenerationRequest, SummarizationRequest
from .response_envelope import ResponseEnvelope
from .completion import Completion

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
