"""LiteLLM proxy backend adapter.

Purpose:
        Route generation through a LiteLLM proxy (default
        ``http://localhost:4000``), which fronts many vendors behind one
        OpenAI-compatible API. Chat, streaming and embeddings reuse
        :class:`OpenAIStyleAdapter`; the proxy's ``/health`` and ``/v1/models``
        routes are read with ``httpx``.

Credentials:
        The proxy may run without a master key. When ``config.api_key`` is
        unset a placeholder key is sent so the OpenAI SDK accepts the client.

Failure modes:
        - ``initialize`` fails with a descriptive error when ``/health`` is not
          reachable; the manager logs it and keeps the backend registered.
        - Live model listing failures fall back to the built-in list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..base.models import BackendKind
from ..base.openai_style import OpenAIStyleAdapter
from ..config.defaults import LITELLM_DEFAULT_BASE_URL, LITELLM_DEFAULT_MODEL, LITELLM_EMBEDDING_MODEL

__all__ = ["LiteLLMBackend"]

_NO_KEY = "sk-no-key-required"


class LiteLLMBackend(OpenAIStyleAdapter):
    """Any model the proxy exposes, addressed as ``<vendor>/<model>``."""

    backend_kind = BackendKind.LITELLM.value
    display_name = "LiteLLM Proxy"
    default_model = LITELLM_DEFAULT_MODEL
    embedding_model = LITELLM_EMBEDDING_MODEL
    static_models = (
        "openai/gpt-4o",
        "openai/gpt-4o-mini",
        "openai/gpt-4-turbo",
        "openai/gpt-4",
        "openai/gpt-3.5-turbo",
        "anthropic/claude-3-5-sonnet-20241022",
        "anthropic/claude-3-5-haiku-20241022",
        "anthropic/claude-3-opus-20240229",
        "gemini/gemini-2.0-flash",
        "gemini/gemini-2.5-pro",
        "gemini/gemini-2.5-flash",
        "ollama/llama3.2",
        "ollama/codellama",
        "ollama/mistral",
        "cohere/command-r",
        "groq/llama3-70b-8192",
        "together_ai/meta-llama/Llama-2-70b-chat-hf",
        "huggingface/microsoft/DialoGPT-medium",
    )

    _http: Optional[httpx.AsyncClient] = None

    @property
    def proxy_url(self) -> str:
        return (self._config.base_url or LITELLM_DEFAULT_BASE_URL).rstrip("/")

    def _resolve_api_key(self) -> str:
        return self._config.api_key or _NO_KEY

    def _base_url(self) -> str:
        return f"{self.proxy_url}/v1"

    def _auth_headers(self) -> Dict[str, str]:
        headers = dict(self._config.custom_headers)
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    def _http_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(base_url=self.proxy_url, timeout=self._config.timeout_seconds)
        return self._http

    async def initialize(self) -> None:
        """Create the SDK client and check that the proxy answers ``/health``."""
        await super().initialize()
        try:
            response = await self._http_client().get("/health", headers=self._auth_headers())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ConnectionError(
                f"Cannot connect to LiteLLM proxy at {self.proxy_url}. Error: {exc}. "
                "Make sure LiteLLM proxy is running."
            ) from exc

    async def aclose(self) -> None:
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()
        await super().aclose()

    async def _list_models_live(self) -> Optional[List[str]]:
        data = await self.get_provider_info()
        ids = [m.get("id") for m in data.get("data") or [] if isinstance(m, dict) and m.get("id")]
        return ids or None

    async def get_health(self) -> Dict[str, Any]:
        """Return the proxy's ``/health`` payload."""
        response = await self._http_client().get("/health", headers=self._auth_headers())
        response.raise_for_status()
        return response.json()

    async def get_provider_info(self) -> Dict[str, Any]:
        """Return the proxy's ``/v1/models`` payload."""
        response = await self._http_client().get("/v1/models", headers=self._auth_headers())
        response.raise_for_status()
        return response.json()

    def switch_model(self, model: str) -> None:
        """Point subsequent requests at ``model``; the SDK client and the config are kept."""
        self._model_override = model
