"""switchboard.config.defaults
===========================

Central place for small, stable default values used across the adapters and
the manager. Environment variables and explicit overrides take precedence;
these constants are the last resort.

This module intentionally imports nothing from the rest of the package so
that it can be imported from anywhere without cycles. Only plain constants
belong here.
"""

from __future__ import annotations

# ---- Resilience defaults ----
# Per-call network timeout (milliseconds).
DEFAULT_TIMEOUT_MS = 60_000
# Attempts per logical call and base backoff delay (milliseconds).
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1_000

# Generation defaults applied when the config leaves them unset.
DEFAULT_MAX_TOKENS = 2_000
DEFAULT_TEMPERATURE = 0.7


# ---- Backend-specific defaults ----
# OpenAI (SDK uses api.openai.com when base_url is omitted).
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_EMBEDDING_MODEL = "text-embedding-3-small"

# Anthropic
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
ANTHROPIC_DEFAULT_MAX_TOKENS = 4_096
ANTHROPIC_PROBE_MODEL = "claude-3-haiku-20240307"

# Google Gemini
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash-exp"
GEMINI_EMBEDDING_MODEL = "text-embedding-004"

# GitHub Copilot (API access)
COPILOT_DEFAULT_MODEL = "gpt-4"
COPILOT_DEFAULT_BASE_URL = "https://api.githubcopilot.com"
COPILOT_DEFAULT_TEMPERATURE = 0.2

# Ollama (local daemon)
OLLAMA_DEFAULT_MODEL = "llama3.2"
OLLAMA_DEFAULT_HOST = "http://localhost:11434"
OLLAMA_CODE_MODEL = "codellama"
OLLAMA_DEFAULT_TOP_P = 0.95

# LiteLLM proxy
LITELLM_DEFAULT_MODEL = "openai/gpt-4o-mini"
LITELLM_DEFAULT_BASE_URL = "http://localhost:4000"
LITELLM_EMBEDDING_MODEL = "openai/text-embedding-3-small"

# xAI (Grok)
XAI_DEFAULT_MODEL = "grok-3-beta"
XAI_DEFAULT_BASE_URL = "https://api.x.ai/v1"
XAI_CODE_MODEL = "grok-code-fast-1"

# Offline mock
MOCK_DEFAULT_MODEL = "mock-1"
