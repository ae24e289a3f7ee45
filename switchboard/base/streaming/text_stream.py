"""Pull-based text stream with explicit close semantics.

Purpose
-------
``generate_stream`` returns a :class:`TextStream`: an async iterator over text
fragments wrapping the adapter's producer (normally an async generator). The
caller drives consumption; nothing is requested from the backend until the
first fragment is pulled.

Close semantics
---------------
- Exhausting the stream, an error raised by the producer, ``aclose()`` and
  leaving an ``async with`` block all close the producer, which releases the
  underlying HTTP connection.
- The stream is finite and non-restartable: once closed, further pulls end
  iteration immediately.
- A mid-stream error is re-raised to the consumer after the fragments
  already delivered; nothing is retried or replayed.

Logging
-------
Emits ``stream.start`` on the first pull, ``stream.error`` when the producer
fails and ``stream.end`` once the producer is released.
"""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional

from ..errors import classify_exception
from ..logging import LogContext, get_logger, normalized_log_event


class TextStream:
    """Async iterator of ``str`` fragments produced by one backend."""

    def __init__(
        self,
        source: AsyncIterator[str],
        *,
        provider: str,
        model: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source
        self._ctx = LogContext(provider=provider, model=model)
        self._logger = logger or get_logger("switchboard.stream")
        self._started = False
        self._finished = False
        self._closed = False
        self._emitted = 0
        self._error: Optional[BaseException] = None

    @property
    def provider(self) -> str:
        return self._ctx.provider or "unknown"

    @property
    def model(self) -> Optional[str]:
        return self._ctx.model

    @property
    def emitted(self) -> int:
        """Number of fragments delivered so far."""
        return self._emitted

    @property
    def finished(self) -> bool:
        """Whether the producer ran to completion."""
        return self._finished

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def __aiter__(self) -> "TextStream":
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        if not self._started:
            self._started = True
            normalized_log_event(self._logger, "stream.start", self._ctx, phase="start", emitted=False)
        try:
            chunk = await self._source.__anext__()
        except StopAsyncIteration:
            self._finished = True
            await self.aclose()
            raise
        except asyncio.CancelledError:
            await self.aclose()
            raise
        except Exception as exc:
            self._error = exc
            normalized_log_event(
                self._logger,
                "stream.error",
                self._ctx,
                phase="error",
                error_code=classify_exception(exc).value,
                emitted=self._emitted > 0,
                level=logging.WARNING,
                fragments=self._emitted,
            )
            await self.aclose()
            raise
        self._emitted += 1
        return chunk

    async def aclose(self) -> None:
        """Release the producer; safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        closer = getattr(self._source, "aclose", None)
        if closer is not None:
            await closer()
        normalized_log_event(
            self._logger,
            "stream.end",
            self._ctx,
            phase="finalize",
            emitted=self._emitted > 0,
            fragments=self._emitted,
            cancelled=not self._finished and self._error is None,
        )

    async def __aenter__(self) -> "TextStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def collect(self) -> str:
        """Drain the remaining fragments and return them joined."""
        parts: List[str] = []
        async for chunk in self:
            parts.append(chunk)
        return "".join(parts)


__all__ = ["TextStream"]
