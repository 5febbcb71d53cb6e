"""Market-type vocabulary shared by every layer."""

from __future__ import annotations

from typing import Literal, Optional


MarketType = Literal["season", "historical"]
Scope = Literal["season", "historical"]
Platform = Literal["pc", "xbl"]
TradeSide = Literal["buy", "sell"]
FundamentalStatus = Literal["live", "cached", "fallback"]

MARKET_TYPES: tuple[MarketType, ...] = ("season", "historical")
PLATFORMS: tuple[Platform, ...] = ("pc", "xbl")
DEFAULT_MARKET: MarketType = "season"


def normalize_market_type(value: Optional[str]) -> MarketType:
    """Anything other than ``"historical"`` falls back to the season market."""
    return "historical" if value == "historical" else DEFAULT_MARKET


def scope_for_market(market_type: MarketType) -> Scope:
    """Stats scope that drives the fundamentals of a market."""
    return "historical" if market_type == "historical" else "season"
