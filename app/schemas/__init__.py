"""Pydantic schemas for API requests and responses."""

from .common import ErrorResponse, HealthResponse
from .fortnite import StatsDebugResponse, StatsPayload
from .market import CoinMarket, MarketResponse, SeriesPoint
from .rooms import (
    CoinLabel,
    HoldingResponse,
    JoinRequest,
    JoinResponse,
    PlayerCodes,
    RoomStateResponse,
)
from .trade import TradeRequest, TradeResponse


__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    # Fortnite
    "StatsDebugResponse",
    "StatsPayload",
    # Market
    "CoinMarket",
    "MarketResponse",
    "SeriesPoint",
    # Rooms
    "CoinLabel",
    "HoldingResponse",
    "JoinRequest",
    "JoinResponse",
    "PlayerCodes",
    "RoomStateResponse",
    # Trade
    "TradeRequest",
    "TradeResponse",
]
