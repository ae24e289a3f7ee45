"""
OpenAI backend package.

Exports:
- OpenAIBackend: adapter for the OpenAI Chat Completions and Embeddings APIs
"""

from .client import OpenAIBackend

__all__ = ["OpenAIBackend"]
