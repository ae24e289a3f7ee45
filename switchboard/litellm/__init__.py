"""
LiteLLM proxy backend package.

Exports:
- LiteLLMBackend: adapter for a LiteLLM proxy's OpenAI-compatible API
"""

from .client import LiteLLMBackend

__all__ = ["LiteLLMBackend"]
