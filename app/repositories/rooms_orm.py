"""Room repository - SQLAlchemy ORM async."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert

from app.database.connection import get_session
from app.database.orm import Room


def _room_to_dict(room: Room) -> dict[str, Any]:
    return {
        "room_code": room.room_code,
        "spread_bps": room.spread_bps,
        "created_at": room.created_at,
    }


async def ensure_room(room_code: str, spread_bps: int) -> None:
    """Create the room unless it already exists. Existing spread is kept."""
    async with get_session() as session:
        stmt = (
            insert(Room)
            .values(room_code=room_code, spread_bps=spread_bps)
            .on_conflict_do_nothing(index_elements=["room_code"])
        )
        await session.execute(stmt)
        await session.commit()


async def get_room(room_code: str) -> dict[str, Any] | None:
    async with get_session() as session:
        result = await session.execute(select(Room).where(Room.room_code == room_code))
        room = result.scalar_one_or_none()
        return _room_to_dict(room) if room else None
