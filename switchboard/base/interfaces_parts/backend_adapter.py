"""BackendAdapter Protocol (single-class module).

The capability contract every backend adapter implements. The manager and
callers depend on this Protocol only, never on a concrete adapter class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol, runtime_checkable

from ..models import (
    CodeAnalysisRequest,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
)

if TYPE_CHECKING:
    from ..streaming import TextStream


@runtime_checkable
class BackendAdapter(Protocol):
    """Uniform operation set over one model-serving backend."""

    async def initialize(self) -> None:
        """Create or validate the network client; idempotent.

        Raises ``ConfigurationError`` when required credentials are absent.
        """
        ...

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> ResponseEnvelope:
        ...

    def generate_stream(self, prompt: str, system_prompt: Optional[str] = None) -> "TextStream":
        """Return a lazy, non-restartable stream of text fragments.

        No network call happens until the first fragment is pulled. Closing
        the stream early releases the underlying connection.
        """
        ...

    async def summarize(self, request: SummarizationRequest) -> ResponseEnvelope:
        ...

    async def analyze_code(self, request: CodeAnalysisRequest) -> ResponseEnvelope:
        ...

    async def generate_diagram(self, request: DiagramGenerationRequest) -> ResponseEnvelope:
        ...

    async def generate_embedding(self, text: str) -> List[float]:
        """Raises ``UnsupportedOperationError`` when the backend has no embeddings."""
        ...

    async def validate_config(self) -> bool:
        """Minimal live probe; never raises."""
        ...

    async def get_model_list(self) -> List[str]:
        """Never empty: falls back to a built-in static list."""
        ...

    def estimate_tokens(self, text: str) -> int:
        ...

    def get_backend_kind(self) -> str:
        ...

    def get_token_count(self) -> int:
        ...

    def reset_token_count(self) -> None:
        ...

    async def aclose(self) -> None:
        """Release the vendor client; the adapter may be reused afterwards."""
        ...
