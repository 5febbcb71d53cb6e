"""Domain types: market vocabulary, coin catalog, normalized stats.

Usage:
    from app.domain import MarketConfig, get_market_config, normalize_market_type
"""

from app.domain.catalog import (
    DEFAULT_COINS,
    CoinProfile,
    MarketConfig,
    get_market_config,
)
from app.domain.market import (
    DEFAULT_MARKET,
    MARKET_TYPES,
    PLATFORMS,
    FundamentalStatus,
    MarketType,
    Platform,
    Scope,
    TradeSide,
    normalize_market_type,
    scope_for_market,
)
from app.domain.stats import FortniteStats

__all__ = [
    # Catalog
    "CoinProfile",
    "DEFAULT_COINS",
    "MarketConfig",
    "get_market_config",
    # Market vocabulary
    "DEFAULT_MARKET",
    "FundamentalStatus",
    "MARKET_TYPES",
    "MarketType",
    "PLATFORMS",
    "Platform",
    "Scope",
    "TradeSide",
    "normalize_market_type",
    "scope_for_market",
    # Stats
    "FortniteStats",
]
