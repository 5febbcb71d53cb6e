"""Trade Pydantic schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.market import MarketType


class TradeRequest(BaseModel):
    """Buy or sell request. ``market_type`` other than 'historical' means season."""

    room_code: str = ""
    player_code: str = ""
    coin: str = ""
    qty: Any = Field(default=None, description="Must be a finite number > 0")
    market_type: Any = None


class TradeResponse(BaseModel):
    exec_price: float
    new_mid: float
    cash: float
    holding_qty: float
    market_type: MarketType
