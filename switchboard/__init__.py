"""switchboard package

Uniform async access to many LLM backends with retry, fallback and token
accounting.

Purpose:
    Provide a small, stable API for callers. Build adapters with
    :func:`create_backend` (or :class:`BackendFactory`) and route across them
    with :class:`BackendManager`.

Public API (re-exported):
    - Version: ``__version__``
    - Configuration: :class:`BackendConfig`, :class:`ManagerConfig`,
      :class:`BackendKind`
    - Factory and manager: :class:`BackendFactory`, :func:`create_backend`,
      :class:`BackendManager`
    - Results: :class:`ResponseEnvelope`, :class:`TextStream`
    - Requests: :class:`SummarizationRequest`, :class:`CodeAnalysisRequest`,
      :class:`DiagramGenerationRequest`
    - Accounting: :class:`UsageRecord`, :class:`InMemoryUsageLog`
    - Exceptions: :class:`ProviderError` and its taxonomy, :class:`ErrorCode`
"""

from .base import (
    AggregateFailure,
    BackendAdapter,
    BackendConfig,
    BackendFactory,
    BackendInfo,
    BackendKind,
    BackendManager,
    BaseBackendAdapter,
    CodeAnalysisRequest,
    ConfigurationError,
    DiagramGenerationRequest,
    ErrorCode,
    InMemoryUsageLog,
    ManagerConfig,
    NoBackendAvailableError,
    ProviderError,
    ResponseEnvelope,
    SummarizationRequest,
    TextStream,
    TransientBackendError,
    UnknownBackendError,
    UnsupportedOperationError,
    UsageRecord,
    UsageRecorder,
)
from .base.factory import create_backend
from .base.logging import configure_logger, get_logger

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BackendAdapter",
    "BaseBackendAdapter",
    "BackendConfig",
    "BackendInfo",
    "BackendKind",
    "BackendFactory",
    "create_backend",
    "BackendManager",
    "ManagerConfig",
    "ResponseEnvelope",
    "TextStream",
    "SummarizationRequest",
    "CodeAnalysisRequest",
    "DiagramGenerationRequest",
    "UsageRecord",
    "UsageRecorder",
    "InMemoryUsageLog",
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "TransientBackendError",
    "AggregateFailure",
    "NoBackendAvailableError",
    "configure_logger",
    "get_logger",
]
