"""Per-backend price tables for usage cost estimation.

Prices are USD per one million tokens as ``(input, output)`` pairs. A model
resolves to its exact entry, else to the longest table key it starts with
(dated snapshots such as ``gpt-4o-2024-08-06`` or
``claude-3-5-sonnet-20241022``), else to the backend's designated default
model. Anthropic, Gemini and Grok tables are keyed by model family for that
reason. Ollama models run locally and always cost zero. Backends without a
table (Copilot, LiteLLM) yield ``None`` (cost unknown) rather than a guess.
"""
from __future__ import annotations

from typing import Dict, Mapping, NamedTuple, Optional, Tuple


class Price(NamedTuple):
    input: float
    output: float


OPENAI_PRICES: Dict[str, Price] = {
    "gpt-4o": Price(2.50, 10.00),
    "gpt-4o-mini": Price(0.15, 0.60),
    "gpt-4-turbo": Price(10.00, 30.00),
    "gpt-4": Price(30.00, 60.00),
    "gpt-3.5-turbo": Price(0.50, 1.50),
    "gpt-5": Price(50.00, 100.00),
    "gpt-5-mini": Price(2.00, 6.00),
}

ANTHROPIC_PRICES: Dict[str, Price] = {
    "claude-3-haiku": Price(0.25, 1.25),
    "claude-3-5-haiku": Price(0.80, 4.00),
    "claude-3-sonnet": Price(3.00, 15.00),
    "claude-3-5-sonnet": Price(3.00, 15.00),
    "claude-3-opus": Price(15.00, 75.00),
    "claude-opus-4": Price(25.00, 125.00),
}

GEMINI_PRICES: Dict[str, Price] = {
    "gemini-1.5-flash": Price(0.075, 0.30),
    "gemini-1.5-pro": Price(1.25, 5.00),
    "gemini-2.0-flash": Price(0.075, 0.30),
    "gemini-2.5-flash": Price(0.10, 0.40),
    "gemini-2.5-pro": Price(2.50, 10.00),
}

GROK_PRICES: Dict[str, Price] = {
    "grok-3": Price(2.00, 10.00),
    "grok-3-mini": Price(0.20, 1.00),
    "grok-4": Price(5.00, 20.00),
}

# local daemon; every model falls through to the zero-priced default
OLLAMA_PRICES: Dict[str, Price] = {
    "local": Price(0.0, 0.0),
}

# backend kind -> (price table, default model used for unknown models)
PRICE_TABLES: Dict[str, Tuple[Mapping[str, Price], str]] = {
    "openai": (OPENAI_PRICES, "gpt-4o-mini"),
    "anthropic": (ANTHROPIC_PRICES, "claude-3-5-sonnet"),
    "google-gemini": (GEMINI_PRICES, "gemini-2.0-flash"),
    "grok": (GROK_PRICES, "grok-3"),
    "ollama": (OLLAMA_PRICES, "local"),
}

_PER_TOKENS = 1_000_000


def resolve_price(provider: str, model: Optional[str]) -> Optional[Price]:
    """Return the price entry for ``model`` on ``provider`` (see module doc)."""
    entry = PRICE_TABLES.get(provider)
    if entry is None:
        return None
    table, default_model = entry
    if model:
        if model in table:
            return table[model]
        prefixes = [key for key in table if model.startswith(key)]
        if prefixes:
            return table[max(prefixes, key=len)]
    return table[default_model]


def estimate_cost(
    provider: str,
    model: Optional[str],
    tokens_used: int,
    prompt_tokens: Optional[int] = None,
    completion_tokens: Optional[int] = None,
) -> Optional[float]:
    """Estimate the USD cost of one call.

    With a known prompt/completion split each side is billed at its own
    rate; otherwise the total is billed at the mean of the two rates.
    """
    price = resolve_price(provider, model)
    if price is None:
        return None
    if prompt_tokens is not None and completion_tokens is not None:
        return (prompt_tokens * price.input + completion_tokens * price.output) / _PER_TOKENS
    return (tokens_used / _PER_TOKENS) * ((price.input + price.output) / 2)


__all__ = [
    "Price",
    "OPENAI_PRICES",
    "ANTHROPIC_PRICES",
    "GEMINI_PRICES",
    "GROK_PRICES",
    "OLLAMA_PRICES",
    "PRICE_TABLES",
    "resolve_price",
    "estimate_cost",
]
