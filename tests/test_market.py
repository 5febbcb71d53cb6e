"""Tests for market aggregation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.catalog import MarketConfig
from app.services.market import MarketService, summarize_coin


NOW = datetime(2026, 5, 10, 20, 0, tzinfo=timezone.utc)


def _ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


@pytest.fixture
def juano(config):
    return config.coin("JUANO")


class TestSummarizeCoin:
    def test_no_ticks_uses_seed(self, config, juano):
        row = summarize_coin(config, juano, "season", [], 0.5, "fallback", NOW)

        assert row["coin_symbol"] == "JUANO"
        assert row["player_label"] == "JuanoYoloXd"
        assert row["market_type"] == "season"
        assert row["price"] == 50000
        assert row["open24"] == row["high24"] == row["low24"] == 50000
        assert row["change24_pct"] == 0
        assert row["trading_price_component"] == 50000
        assert row["fundamental_component"] == 50000
        assert row["fundamental_score"] == 0.5
        assert row["fundamental_status"] == "fallback"
        assert row["series"] == []

    def test_window_stats_ignore_ticks_older_than_24h(self, config, juano):
        ticks = [
            {"price": 51000, "created_at": NOW - timedelta(hours=1)},
            {"price": 50000, "created_at": NOW - timedelta(hours=2)},
            {"price": 40000, "created_at": NOW - timedelta(hours=30)},
        ]

        row = summarize_coin(config, juano, "season", ticks, 0.5, "cached", NOW)

        # display = 0.7 * trading + 0.3 * 50000
        assert row["price"] == 50700
        assert row["open24"] == 50000
        assert row["high24"] == 50700
        assert row["low24"] == 50000
        assert row["change24_pct"] == 1.4
        assert row["trading_price_component"] == 51000
        assert row["series"] == [
            {"t": _ms(NOW - timedelta(hours=30)), "price": 43000},
            {"t": _ms(NOW - timedelta(hours=2)), "price": 50000},
            {"t": _ms(NOW - timedelta(hours=1)), "price": 50700},
        ]

    def test_only_stale_ticks_fall_back_to_latest(self, config, juano):
        ticks = [{"price": 60000, "created_at": NOW - timedelta(days=3)}]

        row = summarize_coin(config, juano, "season", ticks, 0.5, "live", NOW)

        assert row["price"] == 57000
        assert row["open24"] == row["high24"] == row["low24"] == 57000
        assert row["change24_pct"] == 0

    def test_fundamental_component_tracks_score(self, config, juano):
        row = summarize_coin(config, juano, "historical", [], 1.0, "live", NOW)

        assert row["fundamental_component"] == 53750
        assert row["price"] == 53750
        assert row["trading_price_component"] == 50000

    def test_series_keeps_newest_points_oldest_first(self, config, juano):
        ticks = [
            {"price": 50000 + i, "created_at": NOW - timedelta(minutes=i)}
            for i in range(100)
        ]

        series = summarize_coin(config, juano, "season", ticks, 0.5, "cached", NOW)["series"]

        assert len(series) == config.series_points
        assert series[-1]["t"] == _ms(NOW)
        assert series[0]["t"] == _ms(NOW - timedelta(minutes=config.series_points - 1))
        assert [p["t"] for p in series] == sorted(p["t"] for p in series)

    def test_rounding(self, config, juano):
        ticks = [{"price": 50000.123456, "created_at": NOW}]

        row = summarize_coin(config, juano, "season", ticks, 0.123456, "live", NOW)

        assert row["fundamental_score"] == 0.1235
        assert row["trading_price_component"] == 50000.12
        assert row["price"] == round(row["price"], 2)


class TestMarketService:
    @pytest.mark.asyncio
    async def test_market_lists_every_coin_in_catalog_order(self, config, store, mock_fundamentals):
        for coin in config.coins:
            await store.ensure_seed_price("R1", coin.symbol, "season", coin.seed_price)
        service = MarketService(config, mock_fundamentals, now=lambda: store.clock)

        market = await service.get_market("R1", "season")

        assert market["market_type"] == "season"
        assert [c["coin_symbol"] for c in market["coins"]] == ["JUANO", "ZOM", "CRIS"]
        assert [c["price"] for c in market["coins"]] == [50000, 60000, 55000]
        assert all(len(c["series"]) == 1 for c in market["coins"])

    @pytest.mark.asyncio
    async def test_historical_market_reads_historical_scope(self, config, store, mock_fundamentals):
        service = MarketService(config, mock_fundamentals, now=lambda: store.clock)

        await service.get_market("R1", "historical")

        scopes = {call.args[2] for call in mock_fundamentals.get_score_or_fallback.await_args_list}
        assert scopes == {"historical"}
        players = [call.args[:2] for call in mock_fundamentals.get_score_or_fallback.await_args_list]
        assert players == [("JuanoYoloXd", "pc"), ("ZomHeldD", "pc"), ("cristofprime", "xbl")]

    @pytest.mark.asyncio
    async def test_room_without_ticks_still_prices_every_coin(self, store, mock_fundamentals):
        config = MarketConfig()
        service = MarketService(config, mock_fundamentals, now=lambda: store.clock)

        market = await service.get_market("EMPTY", "season")

        assert [c["price"] for c in market["coins"]] == [50000, 60000, 55000]
        assert all(c["series"] == [] for c in market["coins"])
