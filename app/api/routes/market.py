"""Market API route."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_market_service
from app.core.exceptions import BadRequestError
from app.domain.market import normalize_market_type
from app.schemas.market import MarketResponse
from app.services.market import MarketService


router = APIRouter()


@router.get(
    "",
    response_model=MarketResponse,
    summary="Prices, 24h stats and series for every coin",
)
async def get_market(
    room_code: Optional[str] = Query(default=None),
    market_type: Optional[str] = Query(default=None),
    market: MarketService = Depends(get_market_service),
) -> MarketResponse:
    if not room_code:
        raise BadRequestError("Missing room_code")
    return MarketResponse(**await market.get_market(room_code, normalize_market_type(market_type)))
