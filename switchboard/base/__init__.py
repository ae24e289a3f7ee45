"""
Switchboard Base Package

Exports the backend-agnostic contracts, DTOs, the resilience wrapper, the
backend factory and the manager for use by concrete adapters and callers.

Layout:
- Interfaces: the capability contract every adapter satisfies
- Models (DTOs): backend config, request shapes, response envelope
- Errors: normalized taxonomy and classification
- Resilience / streaming / tokens / pricing / usage: shared wrapper pieces
- Factory and routing: lazy adapter creation and fallback dispatch
"""

from .adapter import BaseBackendAdapter
from .errors import (
    AggregateFailure,
    ConfigurationError,
    ErrorCode,
    NoBackendAvailableError,
    ProviderError,
    TransientBackendError,
    UnknownBackendError,
    UnsupportedOperationError,
    classify_exception,
    is_retryable,
)
from .factory import BackendFactory
from .interfaces import BackendAdapter, UsageRecorder
from .models import (
    BackendConfig,
    BackendInfo,
    BackendKind,
    CodeAnalysisRequest,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
)
from .resilience import RetryConfig, retry_async
from .routing import BackendManager, ManagerConfig
from .streaming import TextStream
from .usage import InMemoryUsageLog, UsageRecord

__all__ = [
    "BaseBackendAdapter",
    "BackendAdapter",
    "UsageRecorder",
    "BackendFactory",
    "BackendManager",
    "ManagerConfig",
    "BackendConfig",
    "BackendInfo",
    "BackendKind",
    "SummarizationRequest",
    "CodeAnalysisRequest",
    "DiagramGenerationRequest",
    "ResponseEnvelope",
    "TextStream",
    "RetryConfig",
    "retry_async",
    "UsageRecord",
    "InMemoryUsageLog",
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "TransientBackendError",
    "AggregateFailure",
    "NoBackendAvailableError",
    "classify_exception",
    "is_retryable",
]
