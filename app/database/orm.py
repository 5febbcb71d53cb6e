"""SQLAlchemy ORM models for the stat-coin market.

This module defines all database tables using SQLAlchemy 2.0 ORM style.
Uses async support via asyncpg driver.

Usage:
    from app.database.orm import Room, RoomPlayer
    from app.database.connection import get_session

    async with get_session() as session:
        room = await session.get(Room, "R1")
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Double,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


# Naming convention for constraints and indexes (deterministic names for Alembic)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models with naming convention."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# =============================================================================
# ROOMS & PLAYERS
# =============================================================================


class Room(Base):
    """A shared market room. Created lazily on first join."""
    __tablename__ = "rooms"

    room_code: Mapped[str] = mapped_column(String(64), primary_key=True)
    spread_bps: Mapped[int] = mapped_column(Integer, nullable=False, default=50, server_default="50")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    players: Mapped[list[RoomPlayer]] = relationship(back_populates="room")


class RoomPlayer(Base):
    """One player record per (room, identity, market type)."""
    __tablename__ = "room_players"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_code: Mapped[str] = mapped_column(
        String(64), ForeignKey("rooms.room_code", ondelete="CASCADE"), nullable=False
    )
    player_identity: Mapped[str] = mapped_column(String(200), nullable=False)
    market_type: Mapped[str] = mapped_column(String(20), nullable=False)
    player_code: Mapped[str] = mapped_column(String(220), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Shared secret compared as plain text
    pin: Mapped[str] = mapped_column(String(64), nullable=False)
    cash: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    room: Mapped[Room] = relationship(back_populates="players")
    holdings: Mapped[list[Holding]] = relationship(back_populates="player", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("room_code", "display_name", "market_type", name="uq_room_players_name_market"),
        UniqueConstraint("room_code", "player_identity", "market_type", name="uq_room_players_identity_market"),
        CheckConstraint("market_type IN ('season', 'historical')", name="market_type"),
        CheckConstraint("cash >= 0", name="cash_non_negative"),
        Index("idx_room_players_identity", "room_code", "player_identity"),
    )


class Holding(Base):
    """Quantity of one coin held by one player in one market type."""
    __tablename__ = "holdings"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_code: Mapped[str] = mapped_column(String(64), nullable=False)
    player_id: Mapped[int] = mapped_column(
        ForeignKey("room_players.id", ondelete="CASCADE"), nullable=False
    )
    coin_symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    market_type: Mapped[str] = mapped_column(String(20), nullable=False)
    qty: Mapped[Decimal] = mapped_column(Numeric(24, 8), nullable=False, default=Decimal("0"))

    player: Mapped[RoomPlayer] = relationship(back_populates="holdings")

    __table_args__ = (
        UniqueConstraint("player_id", "coin_symbol", "market_type", name="uq_holdings_player_coin_market"),
        CheckConstraint("qty >= 0", name="qty_non_negative"),
        Index("idx_holdings_room_player", "room_code", "player_id", "market_type"),
    )


# =============================================================================
# PRICES
# =============================================================================


class PriceTick(Base):
    """Append-only trading price series per (room, coin, market type)."""
    __tablename__ = "prices"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_code: Mapped[str] = mapped_column(String(64), nullable=False)
    coin_symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    market_type: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)  # seed, trade
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index(
            "idx_prices_lookup",
            "room_code",
            "coin_symbol",
            "market_type",
            "created_at",
            postgresql_ops={"created_at": "DESC"},
        ),
    )


# =============================================================================
# EXTERNAL STATS CACHE
# =============================================================================


class FortniteStatsCache(Base):
    """Normalized Fortnite stats keyed by (player, platform, scope)."""
    __tablename__ = "fortnite_stats_cache"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_name: Mapped[str] = mapped_column(String(100), nullable=False)
    platform: Mapped[str] = mapped_column(String(10), nullable=False)
    scope: Mapped[str] = mapped_column(String(20), nullable=False)
    wins: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    kd: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    win_rate: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    matches: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    kills: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    computed_score: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    payload: Mapped[dict | None] = mapped_column(JSONB)
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("player_name", "platform", "scope", name="uq_fortnite_stats_cache_key"),
        Index("idx_fortnite_stats_cache_expires", "expires_at"),
    )
