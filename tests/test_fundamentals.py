"""Tests for the fundamental score TTL cache, driven by a simulated clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import Double

from app.core.exceptions import StatsApiError, StatsRateLimitedError
from app.database.orm import FortniteStatsCache
from app.domain.catalog import MarketConfig
from app.domain.stats import FortniteStats
from app.repositories.stats_cache_orm import _entry_to_dict
from app.services.fundamentals import FundamentalsService


START = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeStatsCache:
    """Mirrors stats_cache_orm.get_entry / save_entry in memory, rows built by the real row mapper."""

    def __init__(self):
        self.rows: dict[tuple[str, str, str], dict] = {}
        self.saves = 0

    async def get_entry(self, player, platform, scope):
        return self.rows.get((player, platform, scope))

    async def save_entry(self, stats: FortniteStats, *, observed_at, expires_at):
        self.saves += 1
        entry = FortniteStatsCache(
            player_name=stats.player,
            platform=stats.platform,
            scope=stats.scope,
            wins=stats.wins,
            kd=stats.kd,
            win_rate=stats.win_rate,
            matches=stats.matches,
            kills=stats.kills,
            computed_score=stats.score,
            payload=stats.raw,
            observed_at=observed_at,
            expires_at=expires_at,
        )
        self.rows[(stats.player, stats.platform, stats.scope)] = _entry_to_dict(entry)


def _stats(score: float = 0.8, scope: str = "season") -> FortniteStats:
    return FortniteStats(player="JuanoYoloXd", platform="pc", scope=scope, wins=80, kd=4, win_rate=20, score=score)


@pytest.fixture
def cache():
    fake = FakeStatsCache()
    with patch("app.repositories.stats_cache_orm.get_entry", new=fake.get_entry), \
         patch("app.repositories.stats_cache_orm.save_entry", new=fake.save_entry):
        yield fake


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def stats_client():
    client = AsyncMock()
    client.fetch = AsyncMock(return_value=_stats())
    return client


@pytest.fixture
def service(stats_client, clock):
    return FundamentalsService(MarketConfig(stats_ttl_minutes=10), stats_client, now=clock)


class TestFundamentalsCache:
    @pytest.mark.asyncio
    async def test_first_read_is_live_and_stored(self, service, cache, stats_client):
        stats, status = await service.get("JuanoYoloXd", "pc", "season")

        assert status == "live"
        assert stats.score == 0.8
        stats_client.fetch.assert_awaited_once_with("JuanoYoloXd", "pc", "season")
        row = cache.rows[("JuanoYoloXd", "pc", "season")]
        assert row["observed_at"] == START
        assert row["expires_at"] == START + timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_read_within_ttl_is_cached_without_fetch(self, service, cache, stats_client, clock):
        await service.get("JuanoYoloXd", "pc", "season")
        clock.advance(minutes=9, seconds=59)

        stats, status = await service.get("JuanoYoloXd", "pc", "season")

        assert status == "cached"
        assert stats.score == 0.8
        assert stats.win_rate == 20
        assert stats_client.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_entry_expiring_exactly_now_is_refetched(self, service, cache, stats_client, clock):
        await service.get("JuanoYoloXd", "pc", "season")
        clock.advance(minutes=10)

        _, status = await service.get("JuanoYoloXd", "pc", "season")

        assert status == "live"
        assert stats_client.fetch.await_count == 2
        assert cache.rows[("JuanoYoloXd", "pc", "season")]["expires_at"] == START + timedelta(minutes=20)

    @pytest.mark.asyncio
    async def test_scopes_are_cached_separately(self, service, cache, stats_client):
        await service.get("JuanoYoloXd", "pc", "season")
        _, status = await service.get("JuanoYoloXd", "pc", "historical")

        assert status == "live"
        assert stats_client.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_naive_expiry_is_treated_as_utc(self, service, cache, stats_client):
        cache.rows[("JuanoYoloXd", "pc", "season")] = {
            "computed_score": 0.3,
            "expires_at": (START + timedelta(minutes=1)).replace(tzinfo=None),
        }

        stats, status = await service.get("JuanoYoloXd", "pc", "season")

        assert status == "cached"
        assert stats.score == 0.3
        stats_client.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_error_propagates_and_nothing_is_stored(self, service, cache, stats_client):
        stats_client.fetch.side_effect = StatsRateLimitedError("Fortnite-API rate limited (429)")

        with pytest.raises(StatsRateLimitedError):
            await service.get("JuanoYoloXd", "pc", "season")
        assert cache.saves == 0

    @pytest.mark.asyncio
    async def test_cached_stats_keep_full_precision(self, service, cache, stats_client, clock):
        live = FortniteStats(
            player="JuanoYoloXd", platform="pc", scope="season",
            wins=123.456789, kd=1.23456, win_rate=17.654321, matches=987.5, kills=4321.0625,
            score=0.6543219876,
        )
        stats_client.fetch.return_value = live

        first, _ = await service.get("JuanoYoloXd", "pc", "season")
        clock.advance(minutes=5)
        second, status = await service.get("JuanoYoloXd", "pc", "season")

        assert status == "cached"
        assert second.model_dump(exclude={"raw"}) == first.model_dump(exclude={"raw"})

    def test_stats_columns_are_double_precision(self):
        columns = FortniteStatsCache.__table__.c
        for name in ("wins", "kd", "win_rate", "matches", "kills", "computed_score"):
            assert isinstance(columns[name].type, Double), name


class TestScoreFallback:
    @pytest.mark.asyncio
    async def test_score_from_live_fetch(self, service, cache):
        assert await service.get_score_or_fallback("JuanoYoloXd", "pc", "season") == (0.8, "live")

    @pytest.mark.asyncio
    async def test_upstream_failure_yields_neutral_score(self, service, cache, stats_client):
        stats_client.fetch.side_effect = StatsApiError("Fortnite-API error 500: boom")

        assert await service.get_score_or_fallback("JuanoYoloXd", "pc", "season") == (0.5, "fallback")

    @pytest.mark.asyncio
    async def test_cache_failure_yields_neutral_score(self, stats_client, clock):
        service = FundamentalsService(MarketConfig(), stats_client, now=clock)
        with patch(
            "app.repositories.stats_cache_orm.get_entry",
            new=AsyncMock(side_effect=ConnectionError("db down")),
        ):
            assert await service.get_score_or_fallback("JuanoYoloXd", "pc", "season") == (0.5, "fallback")
