"""OpenAI backend adapter built on :class:`OpenAIStyleAdapter`.

Request shaping, streaming, embeddings and the model-list probe are
inherited from the shared OpenAI-style base; this module only pins the
OpenAI defaults and the built-in model list used when live listing fails.
"""

from __future__ import annotations

from typing import List, Optional

from ..base.models import BackendKind
from ..base.openai_style import OpenAIStyleAdapter
from ..config.defaults import OPENAI_DEFAULT_MODEL, OPENAI_EMBEDDING_MODEL

__all__ = ["OpenAIBackend"]


class OpenAIBackend(OpenAIStyleAdapter):
    """OpenAI GPT models through ``openai.AsyncOpenAI``."""

    backend_kind = BackendKind.OPENAI.value
    display_name = "OpenAI"
    default_model = OPENAI_DEFAULT_MODEL
    embedding_model = OPENAI_EMBEDDING_MODEL
    static_models = (
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4o-audio-preview",
        "gpt-4o-realtime-preview",
        "gpt-4-turbo",
        "gpt-4-turbo-preview",
        "gpt-4-turbo-2024-04-09",
        "gpt-4",
        "gpt-4-32k",
        "gpt-3.5-turbo",
        "gpt-3.5-turbo-16k",
        "gpt-3.5-turbo-instruct",
        "text-embedding-3-small",
        "text-embedding-3-large",
        "text-embedding-ada-002",
    )

    async def _list_models_live(self) -> Optional[List[str]]:
        client = self._ensure_client()
        page = await self._with_timeout(client.models.list())
        ids = sorted(m.id for m in getattr(page, "data", None) or [] if getattr(m, "id", None))
        return ids or None
