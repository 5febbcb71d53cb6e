"""Market aggregation: current price, 24h stats and chart series per coin."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Sequence

from app.core.logging import get_logger
from app.domain.catalog import CoinProfile, MarketConfig
from app.domain.market import FundamentalStatus, MarketType, scope_for_market
from app.repositories import prices_orm as prices_repo
from app.services.fundamentals import FundamentalsService, utcnow
from app.services.pricing import combine_with_config

logger = get_logger("services.market")


def _epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def summarize_coin(
    config: MarketConfig,
    coin: CoinProfile,
    market_type: MarketType,
    ticks: Sequence[Mapping[str, Any]],
    score: float,
    status: FundamentalStatus,
    now: datetime,
) -> dict[str, Any]:
    """Turn newest-first raw ticks and a score into the market row of one coin."""

    def to_display(raw_price: float) -> float:
        return combine_with_config(config, coin.seed_price, raw_price, score)

    combined = [
        {"t": _epoch_ms(tick["created_at"]), "price": to_display(float(tick["price"]))}
        for tick in ticks
    ]
    trading_latest = float(ticks[0]["price"]) if ticks else coin.seed_price
    latest = combined[0]["price"] if combined else to_display(coin.seed_price)

    window_start = _epoch_ms(now - timedelta(hours=config.window_hours))
    recent = [point["price"] for point in combined if point["t"] >= window_start]

    # recent is newest first, so its last element opened the window
    open24 = recent[-1] if recent else latest
    high24 = max(recent) if recent else latest
    low24 = min(recent) if recent else latest
    change24 = (latest - open24) / open24 * 100 if open24 else 0.0

    series = [
        {"t": point["t"], "price": round(point["price"], 2)}
        for point in reversed(combined[: config.series_points])
    ]

    return {
        "coin_symbol": coin.symbol,
        "player_label": coin.label,
        "market_type": market_type,
        "price": round(latest, 2),
        "open24": round(open24, 2),
        "high24": round(high24, 2),
        "low24": round(low24, 2),
        "change24_pct": round(change24, 2),
        "trading_price_component": round(trading_latest, 2),
        "fundamental_component": round(to_display(coin.seed_price), 2),
        "fundamental_score": round(score, 4),
        "fundamental_status": status,
        "series": series,
    }


class MarketService:
    """Builds the market view of a room for one market type."""

    def __init__(
        self,
        config: MarketConfig,
        fundamentals: FundamentalsService,
        now: Callable[[], datetime] = utcnow,
    ):
        self.config = config
        self.fundamentals = fundamentals
        self.now = now

    async def get_coin(self, room_code: str, coin: CoinProfile, market_type: MarketType) -> dict[str, Any]:
        ticks = await prices_repo.get_recent_prices(
            room_code, coin.symbol, market_type, limit=self.config.price_history_limit
        )
        score, status = await self.fundamentals.get_score_or_fallback(
            coin.player, coin.platform, scope_for_market(market_type)
        )
        return summarize_coin(self.config, coin, market_type, ticks, score, status, self.now())

    async def get_market(self, room_code: str, market_type: MarketType) -> dict[str, Any]:
        coins = [await self.get_coin(room_code, coin, market_type) for coin in self.config.coins]
        logger.debug(f"Market built for {room_code}/{market_type}: {len(coins)} coins")
        return {"market_type": market_type, "coins": coins}
