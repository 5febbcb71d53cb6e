"""Coin catalog and game constants.

``MarketConfig`` is immutable and built once per process from settings. Services
receive it explicitly instead of reaching for module globals.

Usage:
    from app.domain.catalog import get_market_config

    config = get_market_config()
    profile = config.coin("JUANO")
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.market import Platform


class CoinProfile(BaseModel):
    """A tradable coin tracking one Fortnite player."""

    symbol: str = Field(..., description="Coin symbol, e.g. JUANO")
    label: str = Field(..., description="Display label")
    player: str = Field(..., description="Epic display name whose stats drive the coin")
    platform: Platform = Field(..., description="Stats platform block to read")
    seed_price: float = Field(..., gt=0, description="Initial and reference price")

    model_config = {"frozen": True}


DEFAULT_COINS: tuple[CoinProfile, ...] = (
    CoinProfile(symbol="JUANO", label="JuanoYoloXd", player="JuanoYoloXd", platform="pc", seed_price=50000),
    CoinProfile(symbol="ZOM", label="ZomHeldD", player="ZomHeldD", platform="pc", seed_price=60000),
    CoinProfile(symbol="CRIS", label="cristofprime", player="cristofprime", platform="xbl", seed_price=55000),
)


class MarketConfig(BaseModel):
    """Every pricing and game constant in one frozen structure."""

    coins: tuple[CoinProfile, ...] = DEFAULT_COINS

    # Price blend: display = alpha * trading + (1 - alpha) * fundamental base
    price_blend_alpha: float = Field(default=0.7, ge=0, le=1)
    fundamental_delta_clamp: float = Field(default=0.25, ge=0, le=1)
    neutral_score: float = Field(default=0.5, ge=0, le=1)

    stats_ttl_minutes: int = Field(default=10, ge=1)
    default_spread_bps: int = Field(default=50, ge=0)
    starting_cash: float = Field(default=100_000, gt=0)

    price_history_limit: int = Field(default=200, ge=1)
    series_points: int = Field(default=60, ge=1)
    window_hours: int = Field(default=24, ge=1)

    model_config = {"frozen": True}

    @property
    def symbols(self) -> list[str]:
        return [coin.symbol for coin in self.coins]

    def coin(self, symbol: str) -> Optional[CoinProfile]:
        for profile in self.coins:
            if profile.symbol == symbol:
                return profile
        return None


@lru_cache
def get_market_config() -> MarketConfig:
    """Build the market config from settings once per process."""
    from app.core.config import settings

    return MarketConfig(
        stats_ttl_minutes=settings.stats_ttl_minutes,
        default_spread_bps=settings.default_spread_bps,
        starting_cash=settings.starting_cash,
    )
