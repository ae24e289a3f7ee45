"""Typed request objects for the convenience operations.

``summarize``, ``analyze_code`` and ``generate_diagram`` accept these instead
of free text. The enumerated fields are ``Literal`` types, so an unsupported
style, analysis type, diagram type or format is rejected at construction with
``pydantic.ValidationError``.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SummarizationStyle = Literal["technical", "simple", "detailed"]
AnalysisType = Literal["summary", "review", "documentation", "complexity", "security"]
DiagramType = Literal["flow", "sequence", "class", "er", "architecture"]
DiagramFormat = Literal["mermaid", "plantuml", "graphviz"]


class SummarizationRequest(BaseModel):
    """Content to summarize plus optional context, length and style hints."""

    model_config = ConfigDict(frozen=True)

    content: str
    context: Optional[str] = None
    max_length: Optional[int] = Field(default=None, gt=0)
    style: SummarizationStyle = "technical"
    language: Optional[str] = None


class CodeAnalysisRequest(BaseModel):
    """Source code, its language and the kind of analysis wanted."""

    model_config = ConfigDict(frozen=True)

    code: str
    language: str
    analysis_type: AnalysisType = "summary"
    context: Optional[str] = None


class DiagramGenerationRequest(BaseModel):
    """Natural-language description of a diagram and its target notation."""

    model_config = ConfigDict(frozen=True)

    description: str
    type: DiagramType = "flow"
    format: DiagramFormat = "mermaid"


__all__ = [
    "SummarizationRequest",
    "CodeAnalysisRequest",
    "DiagramGenerationRequest",
    "SummarizationStyle",
    "AnalysisType",
    "DiagramType",
    "DiagramFormat",
]
