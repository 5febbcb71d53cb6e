"""Displayed coin price: trading price blended with a fundamental nudge."""

from __future__ import annotations

from app.domain.catalog import MarketConfig


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def combine_price(
    seed_price: float,
    trading_price: float,
    score: float,
    *,
    alpha: float = 0.7,
    delta_clamp: float = 0.25,
) -> float:
    """Blend ``alpha`` of the trading price with the fundamental base.

    The base is the seed price shifted by the score's distance from 0.5, capped
    at +/- ``delta_clamp`` of the seed.
    """
    delta = clamp(score - 0.5, -delta_clamp, delta_clamp)
    base = seed_price * (1 + delta)
    return alpha * trading_price + (1 - alpha) * base


def combine_with_config(config: MarketConfig, seed_price: float, trading_price: float, score: float) -> float:
    return combine_price(
        seed_price,
        trading_price,
        score,
        alpha=config.price_blend_alpha,
        delta_clamp=config.fundamental_delta_clamp,
    )
