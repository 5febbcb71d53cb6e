"""Room player repository - SQLAlchemy ORM async.

A human joins once and owns one player row per market type. The rows share
``player_identity`` so either code can be resolved to its sibling.

Usage:
    from app.repositories import players_orm as players_repo

    player = await players_repo.get_player_by_code("R1", "R1-ALICE-season")
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.dialects.postgresql import insert

from app.core.logging import get_logger
from app.database.connection import get_session
from app.database.orm import Holding, RoomPlayer


logger = get_logger("repositories.players_orm")


def _player_to_dict(p: RoomPlayer) -> dict[str, Any]:
    """Convert RoomPlayer ORM object to dictionary."""
    return {
        "id": p.id,
        "room_code": p.room_code,
        "player_identity": p.player_identity,
        "market_type": p.market_type,
        "player_code": p.player_code,
        "display_name": p.display_name,
        "pin": p.pin,
        "cash": float(p.cash),
        "created_at": p.created_at,
    }


async def get_player_by_name(
    room_code: str, display_name: str, market_type: str
) -> dict[str, Any] | None:
    async with get_session() as session:
        result = await session.execute(
            select(RoomPlayer)
            .where(
                RoomPlayer.room_code == room_code,
                RoomPlayer.display_name == display_name,
                RoomPlayer.market_type == market_type,
            )
            .limit(1)
        )
        player = result.scalar_one_or_none()
        return _player_to_dict(player) if player else None


async def get_player_by_code(
    room_code: str, player_code: str, market_type: str | None = None
) -> dict[str, Any] | None:
    """Look up a player by code, optionally restricted to one market type."""
    async with get_session() as session:
        stmt = select(RoomPlayer).where(
            RoomPlayer.room_code == room_code,
            RoomPlayer.player_code == player_code,
        )
        if market_type is not None:
            stmt = stmt.where(RoomPlayer.market_type == market_type)
        result = await session.execute(stmt.limit(1))
        player = result.scalar_one_or_none()
        return _player_to_dict(player) if player else None


async def get_player_by_identity(
    room_code: str, player_identity: str, market_type: str
) -> dict[str, Any] | None:
    async with get_session() as session:
        result = await session.execute(
            select(RoomPlayer)
            .where(
                RoomPlayer.room_code == room_code,
                RoomPlayer.player_identity == player_identity,
                RoomPlayer.market_type == market_type,
            )
            .limit(1)
        )
        player = result.scalar_one_or_none()
        return _player_to_dict(player) if player else None


async def create_player(
    room_code: str,
    *,
    player_identity: str,
    market_type: str,
    player_code: str,
    display_name: str,
    pin: str,
    cash: float,
    coin_symbols: Sequence[str],
) -> tuple[dict[str, Any], bool]:
    """Create a player with zero holdings for every coin.

    Returns ``(player, created)``. When the row already exists (a concurrent join, or a name
    that maps to the same player code), that row is returned with
    ``created=False`` so the caller can still check the PIN.
    """
    async with get_session() as session:
        stmt = (
            insert(RoomPlayer)
            .values(
                room_code=room_code,
                player_identity=player_identity,
                market_type=market_type,
                player_code=player_code,
                display_name=display_name,
                pin=pin,
                cash=Decimal(str(cash)),
            )
            .on_conflict_do_nothing()
            .returning(RoomPlayer.id)
        )
        player_id = (await session.execute(stmt)).scalar_one_or_none()

        if player_id is None:
            await session.rollback()
            logger.info(f"Player {player_code} created concurrently, reusing existing row")
            # Same name, or another spelling that maps to the same player code
            existing = await session.execute(
                select(RoomPlayer)
                .where(
                    RoomPlayer.room_code == room_code,
                    RoomPlayer.market_type == market_type,
                    or_(
                        RoomPlayer.display_name == display_name,
                        RoomPlayer.player_code == player_code,
                    ),
                )
                .order_by(RoomPlayer.id)
                .limit(1)
            )
            return _player_to_dict(existing.scalar_one()), False

        for symbol in coin_symbols:
            await session.execute(
                insert(Holding)
                .values(
                    room_code=room_code,
                    player_id=player_id,
                    coin_symbol=symbol,
                    market_type=market_type,
                    qty=Decimal("0"),
                )
                .on_conflict_do_nothing(
                    index_elements=["player_id", "coin_symbol", "market_type"]
                )
            )
        await session.commit()

        player = await session.get(RoomPlayer, player_id)
        return _player_to_dict(player), True
