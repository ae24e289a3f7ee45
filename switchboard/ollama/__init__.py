"""
Ollama backend package.

Exports:
- OllamaBackend: adapter for a local Ollama daemon over HTTP
"""

from .client import OllamaBackend

__all__ = ["OllamaBackend"]
