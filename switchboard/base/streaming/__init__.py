"""Streaming contract: the pull-based :class:`TextStream`."""

from .text_stream import TextStream

__all__ = ["TextStream"]
