"""Market Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.market import FundamentalStatus, MarketType


class SeriesPoint(BaseModel):
    t: int = Field(..., description="Tick time, epoch milliseconds")
    price: float


class CoinMarket(BaseModel):
    """Market row of one coin."""

    coin_symbol: str
    player_label: str
    market_type: MarketType
    price: float
    open24: float
    high24: float
    low24: float
    change24_pct: float
    trading_price_component: float = Field(..., description="Latest raw trading price")
    fundamental_component: float = Field(..., description="Price if trading sat at the seed")
    fundamental_score: float
    fundamental_status: FundamentalStatus
    series: list[SeriesPoint] = Field(default_factory=list, description="Oldest first")


class MarketResponse(BaseModel):
    market_type: MarketType
    coins: list[CoinMarket]
