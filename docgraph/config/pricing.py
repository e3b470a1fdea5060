"""
Model pricing for cost telemetry.

Prices are estimated USD per 1M tokens, keyed by model family. Dated
snapshots ("gpt-4o-2024-08-06") and fine-tune names ("ft:gpt-4o-mini:acme")
resolve to the longest family prefix they start with, so "gpt-4o-mini-..."
is priced as gpt-4o-mini, not gpt-4o.

Unknown models cost 0.0 and are flagged so the cost report can warn.
"""

from __future__ import annotations

from typing import NamedTuple

PRICING_VERSION = "2026-10-estimate-v2"


class ModelPrice(NamedTuple):
    input_per_million: float
    output_per_million: float


MODEL_PRICES: dict[str, ModelPrice] = {
    "gpt-4o": ModelPrice(2.5, 10.0),
    "gpt-4o-mini": ModelPrice(0.15, 0.6),
    "gpt-4.1": ModelPrice(2.0, 8.0),
    "gpt-4.1-mini": ModelPrice(0.4, 1.6),
    "gpt-4.1-nano": ModelPrice(0.1, 0.4),
}


def price_for(model: str) -> ModelPrice | None:
    """Price of the longest model family `model` belongs to, or None."""
    name = model.strip().lower()
    if name.startswith("ft:"):
        name = name[3:].split(":", 1)[0]
    family = max(
        (f for f in MODEL_PRICES if name == f or name.startswith(f + "-")),
        key=len,
        default=None,
    )
    return MODEL_PRICES[family] if family is not None else None


def estimate_llm_cost_usd(
    model: str,
    *,
    input_tokens: int,
    output_tokens: int,
) -> tuple[float, bool]:
    """
    Estimate the cost of one call.

    Returns:
        (cost_usd, priced) where priced=False means the model is unknown
    """
    price = price_for(model)
    if price is None:
        return 0.0, False
    cost = (
        input_tokens * price.input_per_million + output_tokens * price.output_per_million
    ) / 1_000_000
    return cost, True
