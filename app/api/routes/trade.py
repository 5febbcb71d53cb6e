"""Trade API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_trading_service
from app.domain.market import DEFAULT_MARKET, TradeSide, normalize_market_type
from app.schemas.trade import TradeRequest, TradeResponse
from app.services.trading import TradingService


router = APIRouter()


async def _trade(side: TradeSide, payload: TradeRequest, trading: TradingService) -> TradeResponse:
    market_type = (
        normalize_market_type(payload.market_type)
        if isinstance(payload.market_type, str)
        else DEFAULT_MARKET
    )
    result = await trading.trade(
        side,
        payload.room_code,
        payload.player_code,
        payload.coin,
        payload.qty,
        market_type,
    )
    return TradeResponse(**result)


@router.post("/buy", response_model=TradeResponse, summary="Buy coins at the ask")
async def buy(
    payload: TradeRequest,
    trading: TradingService = Depends(get_trading_service),
) -> TradeResponse:
    return await _trade("buy", payload, trading)


@router.post("/sell", response_model=TradeResponse, summary="Sell coins at the bid")
async def sell(
    payload: TradeRequest,
    trading: TradingService = Depends(get_trading_service),
) -> TradeResponse:
    return await _trade("sell", payload, trading)
