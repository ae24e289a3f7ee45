"""
GitHub Copilot backend package (API access only).

Exports:
- CopilotBackend: adapter for the Copilot chat completions endpoint
"""

from .client import CopilotBackend

__all__ = ["CopilotBackend"]
