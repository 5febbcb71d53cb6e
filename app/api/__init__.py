"""API module with routers and dependencies."""

from .app import create_api_app
from .dependencies import (
    get_config,
    get_fundamentals_service,
    get_market_service,
    get_room_service,
    get_stats_client,
    get_trade_executor,
    get_trading_service,
)


__all__ = [
    "create_api_app",
    "get_config",
    "get_fundamentals_service",
    "get_market_service",
    "get_room_service",
    "get_stats_client",
    "get_trade_executor",
    "get_trading_service",
]
