"""Baseline stat-coin schema.

Revision ID: 001_baseline
Revises: 
Create Date: 2026-10-19

Creates rooms, players, holdings, the price series and the Fortnite stats cache.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_baseline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    # ==========================================================================
    # ROOMS & PLAYERS
    # ==========================================================================

    op.create_table(
        "rooms",
        sa.Column("room_code", sa.String(64), nullable=False),
        sa.Column("spread_bps", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("room_code", name="pk_rooms"),
    )

    op.create_table(
        "room_players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_code", sa.String(64), nullable=False),
        sa.Column("player_identity", sa.String(200), nullable=False),
        sa.Column("market_type", sa.String(20), nullable=False),
        sa.Column("player_code", sa.String(220), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("pin", sa.String(64), nullable=False),
        sa.Column("cash", sa.Numeric(18, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_room_players"),
        sa.ForeignKeyConstraint(
            ["room_code"],
            ["rooms.room_code"],
            name="fk_room_players_room_code_rooms",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("player_code", name="uq_room_players_player_code"),
        sa.UniqueConstraint(
            "room_code", "display_name", "market_type", name="uq_room_players_name_market"
        ),
        sa.UniqueConstraint(
            "room_code", "player_identity", "market_type", name="uq_room_players_identity_market"
        ),
        sa.CheckConstraint(
            "market_type IN ('season', 'historical')", name="ck_room_players_market_type"
        ),
        sa.CheckConstraint("cash >= 0", name="ck_room_players_cash_non_negative"),
    )
    op.create_index("idx_room_players_identity", "room_players", ["room_code", "player_identity"])

    op.create_table(
        "holdings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_code", sa.String(64), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("coin_symbol", sa.String(20), nullable=False),
        sa.Column("market_type", sa.String(20), nullable=False),
        sa.Column("qty", sa.Numeric(24, 8), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_holdings"),
        sa.ForeignKeyConstraint(
            ["player_id"],
            ["room_players.id"],
            name="fk_holdings_player_id_room_players",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "player_id", "coin_symbol", "market_type", name="uq_holdings_player_coin_market"
        ),
        sa.CheckConstraint("qty >= 0", name="ck_holdings_qty_non_negative"),
    )
    op.create_index(
        "idx_holdings_room_player", "holdings", ["room_code", "player_id", "market_type"]
    )

    # ==========================================================================
    # PRICES
    # ==========================================================================

    op.create_table(
        "prices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_code", sa.String(64), nullable=False),
        sa.Column("coin_symbol", sa.String(20), nullable=False),
        sa.Column("market_type", sa.String(20), nullable=False),
        sa.Column("price", sa.Numeric(18, 6), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id", name="pk_prices"),
    )
    op.create_index(
        "idx_prices_lookup",
        "prices",
        ["room_code", "coin_symbol", "market_type", sa.text("created_at DESC")],
    )

    # ==========================================================================
    # EXTERNAL STATS CACHE
    # ==========================================================================

    op.create_table(
        "fortnite_stats_cache",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_name", sa.String(100), nullable=False),
        sa.Column("platform", sa.String(10), nullable=False),
        sa.Column("scope", sa.String(20), nullable=False),
        sa.Column("wins", sa.Double(), nullable=False),
        sa.Column("kd", sa.Double(), nullable=False),
        sa.Column("win_rate", sa.Double(), nullable=False),
        sa.Column("matches", sa.Double(), nullable=False),
        sa.Column("kills", sa.Double(), nullable=False),
        sa.Column("computed_score", sa.Double(), nullable=False),
        sa.Column("payload", postgresql.JSONB()),
        sa.Column("observed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_fortnite_stats_cache"),
        sa.UniqueConstraint(
            "player_name", "platform", "scope", name="uq_fortnite_stats_cache_key"
        ),
    )
    op.create_index(
        "idx_fortnite_stats_cache_expires", "fortnite_stats_cache", ["expires_at"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("fortnite_stats_cache")
    op.drop_table("prices")
    op.drop_table("holdings")
    op.drop_table("room_players")
    op.drop_table("rooms")
