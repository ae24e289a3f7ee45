"""
Google Gemini backend package.

Exports:
- GeminiBackend: adapter for Gemini models through ``google-genai``
"""

from .client import GeminiBackend

__all__ = ["GeminiBackend"]
