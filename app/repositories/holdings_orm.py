"""Holdings repository - SQLAlchemy ORM async."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from app.database.connection import get_session
from app.database.orm import Holding


async def list_holdings(room_code: str, player_id: int, market_type: str) -> list[dict[str, Any]]:
    """Holdings of one player in one market type, ordered by coin symbol."""
    async with get_session() as session:
        result = await session.execute(
            select(Holding.coin_symbol, Holding.qty)
            .where(
                Holding.room_code == room_code,
                Holding.player_id == player_id,
                Holding.market_type == market_type,
            )
            .order_by(Holding.coin_symbol)
        )
        return [
            {"coin_symbol": symbol, "qty": float(qty)}
            for symbol, qty in result.all()
        ]
