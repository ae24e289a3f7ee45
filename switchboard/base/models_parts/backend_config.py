"""Immutable backend configuration object.

Purpose
-------
Carry everything one adapter needs: which backend, credentials, target
model, generation parameters, timeout and retry budget, and backend-specific
extras. One ``BackendConfig`` produces exactly one adapter instance and is
never mutated afterwards (the model is frozen).

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation, ``model_copy`` and ``model_dump``.

Failure modes
-------------
- Out-of-range generation parameters raise ``pydantic.ValidationError`` at
  construction.
- ``backend_kind`` is not restricted to :class:`BackendKind`: unknown kinds
  are accepted here and rejected by the factory with ``UnknownBackendError``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .backend_kind import BackendKind, kind_value


class BackendConfig(BaseModel):
    """Configuration for a single backend adapter.

    Attributes
    ----------
    backend_kind:
        Registry key (e.g. ``"openai"``). Enum members are normalized to
        their string value.
    api_key / github_token:
        Credentials. Which one is required depends on the backend.
    base_url:
        Override for the API endpoint (proxies, self-hosted gateways, daemons).
    model:
        Model identifier; each adapter falls back to its own default.
    max_tokens, temperature, top_p, top_k, frequency_penalty,
    presence_penalty, repetition_penalty, stop_sequences:
        Generation parameters, forwarded where the backend supports them.
    timeout_ms:
        Per network call timeout in milliseconds.
    retry_attempts / retry_delay_ms:
        Retry budget and base backoff delay of the resilience wrapper.
    organization_id, project_id, region, custom_headers, proxy_url:
        Backend-specific extras.
    extra:
        Free-form bag for adapter-specific keys not modelled above.
    """

    model_config = ConfigDict(frozen=True)

    backend_kind: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, gt=0)
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    repetition_penalty: Optional[float] = None
    stop_sequences: Tuple[str, ...] = ()
    timeout_ms: int = Field(default=60_000, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1_000, ge=0)
    organization_id: Optional[str] = None
    project_id: Optional[str] = None
    region: Optional[str] = None
    github_token: Optional[str] = None
    custom_headers: Dict[str, str] = Field(default_factory=dict)
    proxy_url: Optional[str] = None
    streaming_enabled: bool = True
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("backend_kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> str:
        if isinstance(value, (BackendKind, str)):
            return kind_value(value)
        raise TypeError("backend_kind must be a string")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def kind(self) -> Optional[BackendKind]:
        """Return the enum member for ``backend_kind`` or ``None`` if unknown."""
        try:
            return BackendKind(self.backend_kind)
        except ValueError:
            return None

    def with_overrides(self, **changes: Any) -> "BackendConfig":
        """Return a validated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self)(**data)

    @classmethod
    def from_settings(cls, kind: "BackendKind | str", **overrides: Any) -> "BackendConfig":
        """Build a config from defaults, ``.env``, environment and ``overrides``.

        See :func:`switchboard.config.get_backend_settings` for the merge order.
        """
        # config must stay importable without base; import at call time
        from ...config import get_backend_settings

        settings = get_backend_settings(kind, overrides)
        allowed = {k: v for k, v in settings.items() if k in cls.model_fields}
        allowed["backend_kind"] = kind
        return cls(**allowed)


__all__ = ["BackendConfig"]
