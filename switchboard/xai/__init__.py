"""
xAI Grok backend package.

Exports:
- GrokBackend: adapter for the OpenAI-compatible xAI API
"""

from .client import GrokBackend

__all__ = ["GrokBackend"]
