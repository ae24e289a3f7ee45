"""Manager configuration DTO.

Validated with pydantic so a malformed provider list fails at load time
rather than on the first dispatch.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import BackendConfig, BackendKind, kind_value


class ManagerConfig(BaseModel):
    """Configuration consumed by :class:`BackendManager`.

    ``max_retries`` and ``retry_delay_ms`` are manager-wide defaults applied
    to every provider config that did not set ``retry_attempts`` /
    ``retry_delay_ms`` itself.
    """

    model_config = ConfigDict(frozen=True)

    providers: List[BackendConfig] = Field(default_factory=list)
    primary_provider: Optional[str] = None
    fallback_providers: List[str] = Field(default_factory=list)
    enable_fallback: bool = True
    max_retries: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1_000, ge=0)

    @field_validator("primary_provider", mode="before")
    @classmethod
    def _normalize_primary(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return kind_value(value)

    @field_validator("fallback_providers", mode="before")
    @classmethod
    def _normalize_fallbacks(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, (str, BackendKind)):
            value = [value]
        return [kind_value(v) for v in value]


__all__ = ["ManagerConfig"]
