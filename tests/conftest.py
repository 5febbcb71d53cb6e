"""Pytest configuration and fixtures.

No database is needed: the repository functions the services call are patched
with an in-memory store, and the trade executor is replaced by one that settles
against the same store.
"""

from __future__ import annotations

from contextlib import ExitStack
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Generator, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.exceptions import TradeError
from app.domain.catalog import MarketConfig
from app.services.trade_executor import QTY_STEP, TradeOutcome, settle_trade

# Configure asyncio
pytest_plugins = ["pytest_asyncio"]


T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """Dict-backed stand-in for the room, player, holding and price repositories."""

    def __init__(self, start: datetime = T0):
        self.clock = start
        self.rooms: dict[str, dict[str, Any]] = {}
        self.players: list[dict[str, Any]] = []
        self.holdings: dict[tuple[int, str, str], float] = {}
        self.prices: list[dict[str, Any]] = []

    def tick(self) -> datetime:
        self.clock += timedelta(seconds=1)
        return self.clock

    def add_price(self, room_code: str, coin_symbol: str, market_type: str, price: float, source: str) -> None:
        self.prices.append(
            {
                "room_code": room_code,
                "coin_symbol": coin_symbol,
                "market_type": market_type,
                "price": price,
                "source": source,
                "created_at": self.tick(),
            }
        )

    def player(self, player_code: str) -> Optional[dict[str, Any]]:
        return next((p for p in self.players if p["player_code"] == player_code), None)

    # rooms_orm

    async def ensure_room(self, room_code: str, spread_bps: int) -> None:
        self.rooms.setdefault(room_code, {"room_code": room_code, "spread_bps": spread_bps})

    async def get_room(self, room_code: str) -> Optional[dict[str, Any]]:
        return self.rooms.get(room_code)

    # prices_orm

    async def ensure_seed_price(self, room_code: str, coin_symbol: str, market_type: str, price: float) -> bool:
        if any(
            p["room_code"] == room_code and p["coin_symbol"] == coin_symbol and p["market_type"] == market_type
            for p in self.prices
        ):
            return False
        self.add_price(room_code, coin_symbol, market_type, price, "seed")
        return True

    async def get_recent_prices(
        self, room_code: str, coin_symbol: str, market_type: str, limit: int = 200
    ) -> list[dict[str, Any]]:
        rows = [
            p
            for p in self.prices
            if p["room_code"] == room_code and p["coin_symbol"] == coin_symbol and p["market_type"] == market_type
        ]
        rows.sort(key=lambda p: p["created_at"], reverse=True)
        return [
            {"price": p["price"], "source": p["source"], "created_at": p["created_at"]}
            for p in rows[:limit]
        ]

    # players_orm

    async def get_player_by_name(self, room_code: str, display_name: str, market_type: str):
        for p in self.players:
            if (p["room_code"], p["display_name"], p["market_type"]) == (room_code, display_name, market_type):
                return dict(p)
        return None

    async def get_player_by_code(self, room_code: str, player_code: str, market_type: Optional[str] = None):
        for p in self.players:
            if p["room_code"] == room_code and p["player_code"] == player_code:
                if market_type is None or p["market_type"] == market_type:
                    return dict(p)
        return None

    async def get_player_by_identity(self, room_code: str, player_identity: str, market_type: str):
        for p in self.players:
            if (p["room_code"], p["player_identity"], p["market_type"]) == (room_code, player_identity, market_type):
                return dict(p)
        return None

    async def create_player(
        self,
        room_code: str,
        *,
        player_identity: str,
        market_type: str,
        player_code: str,
        display_name: str,
        pin: str,
        cash: float,
        coin_symbols: list[str],
    ) -> tuple[dict[str, Any], bool]:
        existing = await self.get_player_by_name(room_code, display_name, market_type)
        if existing is None:
            existing = await self.get_player_by_code(room_code, player_code, market_type)
        if existing:
            return existing, False
        player = {
            "id": len(self.players) + 1,
            "room_code": room_code,
            "player_identity": player_identity,
            "market_type": market_type,
            "player_code": player_code,
            "display_name": display_name,
            "pin": pin,
            "cash": float(cash),
            "created_at": self.tick(),
        }
        self.players.append(player)
        for symbol in coin_symbols:
            self.holdings[(player["id"], symbol, market_type)] = 0.0
        return dict(player), True

    # holdings_orm

    async def list_holdings(self, room_code: str, player_id: int, market_type: str) -> list[dict[str, Any]]:
        return [
            {"coin_symbol": symbol, "qty": qty}
            for (pid, symbol, mt), qty in self.holdings.items()
            if pid == player_id and mt == market_type
        ]

    def bindings(self) -> list[tuple[str, Any]]:
        return [
            ("app.repositories.rooms_orm.ensure_room", self.ensure_room),
            ("app.repositories.rooms_orm.get_room", self.get_room),
            ("app.repositories.prices_orm.ensure_seed_price", self.ensure_seed_price),
            ("app.repositories.prices_orm.get_recent_prices", self.get_recent_prices),
            ("app.repositories.players_orm.get_player_by_name", self.get_player_by_name),
            ("app.repositories.players_orm.get_player_by_code", self.get_player_by_code),
            ("app.repositories.players_orm.get_player_by_identity", self.get_player_by_identity),
            ("app.repositories.players_orm.create_player", self.create_player),
            ("app.repositories.holdings_orm.list_holdings", self.list_holdings),
        ]


class InMemoryTradeExecutor:
    """Settles trades against an InMemoryStore with the production settlement rules."""

    def __init__(self, config: MarketConfig, store: InMemoryStore):
        self.config = config
        self.store = store

    async def execute(self, room_code, player_code, market_type, side, coin_symbol, qty) -> TradeOutcome:
        coin = self.config.coin(coin_symbol)
        if coin is None:
            raise TradeError("Unknown coin")
        player = self.store.player(player_code)
        if player is None or player["market_type"] != market_type:
            raise TradeError("Player not found")

        ticks = await self.store.get_recent_prices(room_code, coin.symbol, market_type, limit=1)
        mid = Decimal(str(ticks[0]["price"])) if ticks else Decimal(str(coin.seed_price))
        room = self.store.rooms.get(room_code) or {}
        spread = room.get("spread_bps") or self.config.default_spread_bps
        key = (player["id"], coin.symbol, market_type)

        settlement = settle_trade(
            side,
            Decimal(str(qty)).quantize(QTY_STEP),
            mid,
            spread,
            Decimal(str(player["cash"])),
            Decimal(str(self.store.holdings.get(key, 0.0))),
        )
        player["cash"] = float(settlement.cash)
        self.store.holdings[key] = float(settlement.holding_qty)
        self.store.add_price(room_code, coin.symbol, market_type, float(settlement.exec_price), "trade")

        return TradeOutcome(
            exec_price=float(settlement.exec_price),
            new_mid=float(settlement.exec_price),
            cash=float(settlement.cash),
            holding_qty=float(settlement.holding_qty),
        )


@pytest.fixture
def config() -> MarketConfig:
    """Default market configuration."""
    return MarketConfig()


@pytest.fixture
def store() -> Generator[InMemoryStore, None, None]:
    """In-memory repositories patched into the service layer."""
    store = InMemoryStore()
    with ExitStack() as stack:
        for target, replacement in store.bindings():
            stack.enter_context(patch(target, new=replacement))
        yield store


@pytest.fixture
def mock_fundamentals() -> MagicMock:
    """Fundamentals service that always answers a neutral, cached score."""
    service = MagicMock()
    service.get_score_or_fallback = AsyncMock(return_value=(0.5, "cached"))
    service.get = AsyncMock()
    return service


@pytest.fixture
def client(config, store, mock_fundamentals) -> Generator[TestClient, None, None]:
    """Synchronous test client wired to the in-memory store."""
    from app.api import dependencies as deps
    from app.main import app

    app.dependency_overrides[deps.get_config] = lambda: config
    app.dependency_overrides[deps.get_fundamentals_service] = lambda: mock_fundamentals
    app.dependency_overrides[deps.get_trade_executor] = lambda: InMemoryTradeExecutor(config, store)

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
