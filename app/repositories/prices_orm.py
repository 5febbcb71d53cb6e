"""Price tick repository - SQLAlchemy ORM async.

Ticks are append-only: rows are inserted (seed or trade) and never updated.

Usage:
    from app.repositories import prices_orm as prices_repo

    ticks = await prices_repo.get_recent_prices("R1", "JUANO", "season", limit=200)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import desc, select

from app.database.connection import get_session
from app.database.orm import PriceTick


def _tick_to_dict(tick: PriceTick) -> dict[str, Any]:
    return {
        "price": float(tick.price),
        "source": tick.source,
        "created_at": tick.created_at,
    }


async def ensure_seed_price(
    room_code: str, coin_symbol: str, market_type: str, price: float
) -> bool:
    """Insert a seed tick unless the series already has one. Returns True if inserted."""
    async with get_session() as session:
        existing = await session.execute(
            select(PriceTick.id)
            .where(
                PriceTick.room_code == room_code,
                PriceTick.coin_symbol == coin_symbol,
                PriceTick.market_type == market_type,
            )
            .limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            return False

        session.add(
            PriceTick(
                room_code=room_code,
                coin_symbol=coin_symbol,
                market_type=market_type,
                price=Decimal(str(price)),
                source="seed",
            )
        )
        await session.commit()
        return True


async def get_recent_prices(
    room_code: str, coin_symbol: str, market_type: str, limit: int = 200
) -> list[dict[str, Any]]:
    """Most recent ticks, newest first."""
    async with get_session() as session:
        result = await session.execute(
            select(PriceTick)
            .where(
                PriceTick.room_code == room_code,
                PriceTick.coin_symbol == coin_symbol,
                PriceTick.market_type == market_type,
            )
            .order_by(desc(PriceTick.created_at), desc(PriceTick.id))
            .limit(limit)
        )
        return [_tick_to_dict(t) for t in result.scalars().all()]
