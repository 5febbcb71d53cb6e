"""API dependencies wiring services to their collaborators.

Every service receives the immutable ``MarketConfig`` explicitly. Tests swap
any of these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends

from app.domain.catalog import MarketConfig, get_market_config
from app.services.fortnite_stats import FortniteStatsClient
from app.services.fundamentals import FundamentalsService
from app.services.market import MarketService
from app.services.rooms import RoomService
from app.services.trade_executor import SqlTradeExecutor, TradeExecutor
from app.services.trading import TradingService


__all__ = [
    "get_config",
    "get_fundamentals_service",
    "get_market_service",
    "get_room_service",
    "get_stats_client",
    "get_trade_executor",
    "get_trading_service",
]


def get_config() -> MarketConfig:
    return get_market_config()


def get_stats_client() -> FortniteStatsClient:
    return FortniteStatsClient()


def get_fundamentals_service(
    config: MarketConfig = Depends(get_config),
    client: FortniteStatsClient = Depends(get_stats_client),
) -> FundamentalsService:
    return FundamentalsService(config, client)


def get_market_service(
    config: MarketConfig = Depends(get_config),
    fundamentals: FundamentalsService = Depends(get_fundamentals_service),
) -> MarketService:
    return MarketService(config, fundamentals)


def get_room_service(config: MarketConfig = Depends(get_config)) -> RoomService:
    return RoomService(config)


def get_trade_executor(config: MarketConfig = Depends(get_config)) -> TradeExecutor:
    return SqlTradeExecutor(config)


def get_trading_service(
    rooms: RoomService = Depends(get_room_service),
    executor: TradeExecutor = Depends(get_trade_executor),
) -> TradingService:
    return TradingService(rooms, executor)
