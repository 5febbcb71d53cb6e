"""Fortnite stats cache repository using SQLAlchemy ORM.

One row per (player, platform, scope). Freshness is decided by the caller from
``expires_at`` so the clock stays in one place.

Usage:
    from app.repositories import stats_cache_orm as stats_cache_repo

    row = await stats_cache_repo.get_entry("JuanoYoloXd", "pc", "season")
    await stats_cache_repo.save_entry(stats, observed_at=now, expires_at=now + ttl)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert

from app.core.logging import get_logger
from app.database.connection import get_session
from app.database.orm import FortniteStatsCache
from app.domain.stats import FortniteStats


logger = get_logger("repositories.stats_cache_orm")


def _entry_to_dict(entry: FortniteStatsCache) -> dict[str, Any]:
    return {
        "player_name": entry.player_name,
        "platform": entry.platform,
        "scope": entry.scope,
        "wins": float(entry.wins),
        "kd": float(entry.kd),
        "win_rate": float(entry.win_rate),
        "matches": float(entry.matches),
        "kills": float(entry.kills),
        "computed_score": float(entry.computed_score),
        "payload": entry.payload,
        "observed_at": entry.observed_at,
        "expires_at": entry.expires_at,
    }


async def get_entry(player: str, platform: str, scope: str) -> Optional[dict[str, Any]]:
    """Get the cache row for a key, expired or not."""
    async with get_session() as session:
        result = await session.execute(
            select(FortniteStatsCache).where(
                FortniteStatsCache.player_name == player,
                FortniteStatsCache.platform == platform,
                FortniteStatsCache.scope == scope,
            )
        )
        entry = result.scalar_one_or_none()
        return _entry_to_dict(entry) if entry else None


async def save_entry(
    stats: FortniteStats, *, observed_at: datetime, expires_at: datetime
) -> None:
    """Upsert the cache row for ``stats``. Concurrent writers: last one wins."""
    values = {
        "wins": stats.wins,
        "kd": stats.kd,
        "win_rate": stats.win_rate,
        "matches": stats.matches,
        "kills": stats.kills,
        "computed_score": stats.score,
        "payload": stats.raw,
        "observed_at": observed_at,
        "expires_at": expires_at,
    }
    async with get_session() as session:
        stmt = (
            insert(FortniteStatsCache)
            .values(
                player_name=stats.player,
                platform=stats.platform,
                scope=stats.scope,
                **values,
            )
            .on_conflict_do_update(
                index_elements=["player_name", "platform", "scope"],
                set_=values,
            )
        )
        await session.execute(stmt)
        await session.commit()
    logger.debug(f"Stats cache saved: {stats.player}/{stats.platform}/{stats.scope}")
