"""Fundamental score cache.

TTL cache of normalized Fortnite stats, persisted in ``fortnite_stats_cache``.
A row is served while ``expires_at`` is strictly in the future; otherwise the
stats API is called and the row is upserted. There is no locking: concurrent
refreshes of one key are allowed and the last write wins.

Usage:
    service = FundamentalsService(config, FortniteStatsClient())
    stats, status = await service.get("JuanoYoloXd", "pc", "season")
    score, status = await service.get_score_or_fallback("JuanoYoloXd", "pc", "season")
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

from app.core.logging import get_logger
from app.domain.catalog import MarketConfig
from app.domain.market import FundamentalStatus, Platform, Scope
from app.domain.stats import FortniteStats
from app.repositories import stats_cache_orm as stats_cache_repo
from app.services.fortnite_stats import FortniteStatsClient

logger = get_logger("services.fundamentals")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _stats_from_row(row: Mapping[str, Any], player: str, platform: Platform, scope: Scope) -> FortniteStats:
    return FortniteStats(
        player=player,
        platform=platform,
        scope=scope,
        wins=row.get("wins") or 0.0,
        kd=row.get("kd") or 0.0,
        win_rate=row.get("win_rate") or 0.0,
        matches=row.get("matches") or 0.0,
        kills=row.get("kills") or 0.0,
        score=row.get("computed_score") or 0.0,
        raw=row.get("payload"),
    )


class FundamentalsService:
    """Cached access to fundamental scores."""

    def __init__(
        self,
        config: MarketConfig,
        client: FortniteStatsClient,
        now: Callable[[], datetime] = utcnow,
    ):
        self.config = config
        self.client = client
        self.now = now

    async def get(
        self, player: str, platform: Platform, scope: Scope
    ) -> tuple[FortniteStats, FundamentalStatus]:
        """Cached stats if fresh, otherwise a live fetch that refreshes the cache.

        Stats API errors propagate.
        """
        now = self.now()
        row = await stats_cache_repo.get_entry(player, platform, scope)
        if row and row.get("expires_at") and _aware(row["expires_at"]) > now:
            logger.debug(f"Stats cache hit: {player}/{platform}/{scope}")
            return _stats_from_row(row, player, platform, scope), "cached"

        stats = await self.client.fetch(player, platform, scope)
        expires_at = now + timedelta(minutes=self.config.stats_ttl_minutes)
        await stats_cache_repo.save_entry(stats, observed_at=now, expires_at=expires_at)
        logger.info(f"Stats refreshed: {player}/{platform}/{scope} score={stats.score:.4f}")
        return stats, "live"

    async def get_score_or_fallback(
        self, player: str, platform: Platform, scope: Scope
    ) -> tuple[float, FundamentalStatus]:
        """Score for market reads. Any failure yields the neutral score."""
        try:
            stats, status = await self.get(player, platform, scope)
        except Exception as e:
            logger.warning(f"Fundamentals fallback for {player}/{platform}/{scope}: {e}")
            return self.config.neutral_score, "fallback"
        return stats.score, status
