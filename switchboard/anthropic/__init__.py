"""
Anthropic backend package.

Exports:
- AnthropicBackend: adapter for the Claude Messages API
"""

from .client import AnthropicBackend

__all__ = ["AnthropicBackend"]
