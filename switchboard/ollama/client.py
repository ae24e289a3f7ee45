"""Ollama backend adapter.

Purpose:
        Generation, streaming, embeddings and model management against the
        local Ollama HTTP API (default ``http://localhost:11434``).

External dependencies:
        - HTTP client only (``httpx.AsyncClient``). No SDK or API key is
          required since Ollama is a local daemon.

Timeout strategy:
        - ``config.timeout_seconds`` is the client timeout and also bounds each
          non-streaming attempt in the shared wrapper. ``pull_model`` runs
          without a timeout because downloads can take minutes.

Error handling:
        - Every response goes through ``raise_for_status`` so the HTTP status
          reaches the shared classification (5xx and 429 are retried).
        - ``initialize`` checks ``/api/tags`` and fails with a descriptive
          ``ConnectionError`` when the daemon is not running.

Streaming:
        - ``/api/generate`` with ``stream: true`` returns NDJSON; each line's
          ``response`` field is one fragment. The HTTP response is closed when
          the consumer stops early.
        - An ``error`` line or a body that ends before the ``done`` line raises
          ``TransientBackendError``; the daemon sends no status for either.
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..base.adapter import BaseBackendAdapter
from ..base.errors import TransientBackendError
from ..base.models import (
    BackendKind,
    CodeAnalysisRequest,
    Completion,
    DiagramGenerationRequest,
    ResponseEnvelope,
    SummarizationRequest,
)
from ..base.prompts import PromptPair, fenced
from ..base.tokens import extract_ollama_token_usage
from ..config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    OLLAMA_CODE_MODEL,
    OLLAMA_DEFAULT_HOST,
    OLLAMA_DEFAULT_MODEL,
    OLLAMA_DEFAULT_TOP_P,
)

__all__ = ["OllamaBackend", "COMMON_MODELS"]

# Frequently pulled tags, listed after the installed ones.
COMMON_MODELS = (
    "llama3.2:latest",
    "llama3.2:1b",
    "llama3.2:3b",
    "llama3.1:latest",
    "llama3.1:8b",
    "llama3.1:70b",
    "llama3.1:405b",
    "llama2:7b",
    "llama2:13b",
    "llama2:70b",
    "codellama:7b",
    "codellama:13b",
    "codellama:34b",
    "codellama:70b",
    "deepseek-coder:6.7b",
    "deepseek-coder:33b",
    "starcoder2:3b",
    "starcoder2:7b",
    "starcoder2:15b",
    "mistral:latest",
    "mistral:7b",
    "mixtral:8x7b",
    "mixtral:8x22b",
    "gemma2:2b",
    "gemma2:9b",
    "gemma2:27b",
    "qwen2.5:0.5b",
    "qwen2.5:1.5b",
    "qwen2.5:3b",
    "qwen2.5:7b",
    "qwen2.5:14b",
    "qwen2.5:32b",
    "qwen2.5:72b",
    "phi3:mini",
    "phi3:medium",
)

_ANALYSIS_INSTRUCTIONS = {
    "summary": "Explain what this code does",
    "review": "Review this code and suggest improvements",
    "documentation": "Generate documentation for this code",
    "complexity": "Analyze the complexity of this code",
    "security": "Check for security issues in this code",
}


def _coerce_non_empty_str(candidate: Any, fallback: str) -> str:
    """Return ``candidate`` stripped, or ``fallback`` when it is empty or missing."""
    if candidate is None:
        return fallback
    coerced = str(candidate).strip()
    return coerced or fallback


class OllamaBackend(BaseBackendAdapter):
    """Local models served by an Ollama daemon."""

    backend_kind = BackendKind.OLLAMA.value
    display_name = "Ollama"
    default_model = OLLAMA_DEFAULT_MODEL
    static_models = ("llama3.2", "codellama", "mistral", "mixtral")

    @property
    def host(self) -> str:
        return _coerce_non_empty_str(self._config.base_url, OLLAMA_DEFAULT_HOST).rstrip("/")

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.host,
            timeout=self._config.timeout_seconds,
            headers=dict(self._config.custom_headers),
        )

    async def initialize(self) -> None:
        """Create the HTTP client and check that the daemon answers."""
        await super().initialize()
        try:
            await self._tags()
        except httpx.HTTPError as exc:
            raise ConnectionError(
                f"Cannot connect to Ollama at {self.host}. Error: {exc}. Make sure Ollama is running."
            ) from exc

    def _options(self) -> Dict[str, Any]:
        cfg = self._config
        options: Dict[str, Any] = {
            "temperature": cfg.temperature if cfg.temperature is not None else DEFAULT_TEMPERATURE,
            "top_p": cfg.top_p if cfg.top_p is not None else OLLAMA_DEFAULT_TOP_P,
            "top_k": cfg.top_k,
            "num_predict": cfg.max_tokens or DEFAULT_MAX_TOKENS,
            "repeat_penalty": cfg.repetition_penalty,
            "stop": list(cfg.stop_sequences) or None,
        }
        return {k: v for k, v in options.items() if v is not None}

    def _payload(self, prompt: str, system_prompt: Optional[str], *, stream: bool) -> Dict[str, Any]:
        return {
            "model": self.model,
            "prompt": f"{system_prompt}\n\n{prompt}" if system_prompt else prompt,
            "stream": stream,
            "options": self._options(),
        }

    async def _complete(self, prompt: str, system_prompt: Optional[str]) -> Completion:
        client = self._ensure_client()
        response = await client.post("/api/generate", json=self._payload(prompt, system_prompt, stream=False))
        response.raise_for_status()
        data = response.json()
        return Completion(
            content=data.get("response") or "",
            model=data.get("model") or self.model,
            usage=extract_ollama_token_usage(data),
            finish_reason=data.get("done_reason") or ("stop" if data.get("done") else None),
            metadata={
                "total_duration": data.get("total_duration"),
                "load_duration": data.get("load_duration"),
                "eval_duration": data.get("eval_duration"),
            },
        )

    async def _stream(self, prompt: str, system_prompt: Optional[str]) -> AsyncIterator[str]:
        client = self._ensure_client()
        payload = self._payload(prompt, system_prompt, stream=True)
        async with client.stream("POST", "/api/generate", json=payload) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if not line.strip():
                    continue
                chunk = json.loads(line)
                if chunk.get("error"):
                    raise TransientBackendError(
                        f"Ollama stream error: {chunk['error']}",
                        provider=self.backend_kind,
                        model=self.model,
                    )
                text = chunk.get("response")
                if text:
                    yield text
                if chunk.get("done"):
                    return
        raise TransientBackendError(
            "Ollama stream ended before the done marker",
            provider=self.backend_kind,
            model=self.model,
        )

    async def _embed(self, text: str) -> List[float]:
        client = self._ensure_client()
        response = await client.post("/api/embeddings", json={"model": self.model, "prompt": text})
        response.raise_for_status()
        return [float(v) for v in response.json().get("embedding") or []]

    async def _tags(self) -> Dict[str, Any]:
        client = self._ensure_client()
        response = await client.get("/api/tags")
        response.raise_for_status()
        return response.json()

    async def _probe(self) -> None:
        await self.initialize()

    async def _list_models_live(self) -> Optional[List[str]]:
        data = await self._with_timeout(self._tags())
        installed = [m.get("name") for m in data.get("models") or [] if m.get("name")]
        # installed first, then common tags, without duplicates
        return list(dict.fromkeys([*installed, *COMMON_MODELS]))

    async def analyze_code(self, request: CodeAnalysisRequest) -> ResponseEnvelope:
        """Analyze on a code model unless the configured model already is one."""
        current = self.model or ""
        with self._pinned_model(current if "code" in current else OLLAMA_CODE_MODEL):
            return await super().analyze_code(request)

    def _summarize_prompt(self, request: SummarizationRequest) -> PromptPair:
        prompt = f"Summarize the following:\n\n{request.content}"
        if request.context:
            prompt += f"\n\nContext: {request.context}"
        return prompt, f"Provide a {request.style} summary."

    def _code_analysis_prompt(self, request: CodeAnalysisRequest) -> PromptPair:
        prompt = (
            f"{_ANALYSIS_INSTRUCTIONS[request.analysis_type]} ({request.language}):\n\n"
            f"{fenced(request.code, request.language)}"
        )
        return prompt, None

    def _diagram_prompt(self, request: DiagramGenerationRequest) -> PromptPair:
        prompt = (
            f"Generate a {request.type} diagram in {request.format} format for: "
            f"{request.description}. Return only the diagram code."
        )
        return prompt, None

    # ------------------------------------------------------------------
    # Model management

    async def list_models(self) -> List[Dict[str, Any]]:
        """Return the daemon's installed models as reported by ``/api/tags``."""
        return list((await self._tags()).get("models") or [])

    async def pull_model(self, name: str) -> None:
        client = self._ensure_client()
        response = await client.post("/api/pull", json={"model": name, "stream": False}, timeout=None)
        response.raise_for_status()

    async def delete_model(self, name: str) -> None:
        client = self._ensure_client()
        response = await client.request("DELETE", "/api/delete", json={"model": name})
        response.raise_for_status()
