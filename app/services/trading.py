"""Trade dispatcher: validate, resolve the player for the market, forward.

Affordability is the executor's concern; this layer only checks the request
shape and maps the caller's player code to the target market.
"""

from __future__ import annotations

import math
from typing import Any

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.logging import get_logger
from app.domain.market import MarketType, TradeSide
from app.services.rooms import RoomService
from app.services.trade_executor import TradeExecutor

logger = get_logger("services.trading")


def _valid_qty(qty: Any) -> bool:
    if isinstance(qty, bool):
        return False
    try:
        value = float(qty)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


class TradingService:
    def __init__(self, rooms: RoomService, executor: TradeExecutor):
        self.rooms = rooms
        self.executor = executor

    async def trade(
        self,
        side: TradeSide,
        room_code: str,
        player_code: str,
        coin: str,
        qty: Any,
        market_type: MarketType,
    ) -> dict[str, Any]:
        if not room_code or not player_code or not coin or not _valid_qty(qty):
            raise BadRequestError("Missing fields")

        resolved = await self.rooms.resolve_player_code(room_code, player_code, market_type)
        if not resolved:
            raise NotFoundError("Player not found")

        # TradeError from the executor carries its message to the client unchanged
        outcome = await self.executor.execute(
            room_code, resolved, market_type, side, coin, float(qty)
        )
        logger.debug(f"Trade {side} {coin} x{qty} for {resolved} executed at {outcome.exec_price}")
        return {**outcome.to_dict(), "market_type": market_type}
