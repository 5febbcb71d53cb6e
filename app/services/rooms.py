"""Room and player registry.

Joining a room is idempotent: the room, its seed prices and the caller's
season/historical player rows are created on first join and reused afterwards.
PINs are compared as plain strings.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from app.core.exceptions import AuthorizationError, BadRequestError, NotFoundError
from app.core.logging import get_logger
from app.domain.catalog import MarketConfig
from app.domain.market import MARKET_TYPES, MarketType
from app.repositories import holdings_orm as holdings_repo
from app.repositories import players_orm as players_repo
from app.repositories import prices_orm as prices_repo
from app.repositories import rooms_orm as rooms_repo

logger = get_logger("services.rooms")

_IDENTITY_UNSAFE = re.compile(r"[^A-Z0-9]")


def player_identity(room_code: str, display_name: str) -> str:
    """Stable key shared by a person's season and historical player rows."""
    return f"{room_code}-{_IDENTITY_UNSAFE.sub('-', display_name.upper())}"


def player_code_for(identity: str, market_type: MarketType) -> str:
    return f"{identity}-{market_type}"


class RoomService:
    """Join rooms, read player state and resolve player codes across markets."""

    def __init__(self, config: MarketConfig):
        self.config = config

    async def room_spread(self, room_code: str) -> int:
        room = await rooms_repo.get_room(room_code)
        spread = room.get("spread_bps") if room else None
        return int(spread) if spread else self.config.default_spread_bps

    async def seed_prices(self, room_code: str) -> None:
        for coin in self.config.coins:
            for market_type in MARKET_TYPES:
                inserted = await prices_repo.ensure_seed_price(
                    room_code, coin.symbol, market_type, coin.seed_price
                )
                if inserted:
                    logger.info(f"Seeded {coin.symbol}/{market_type} in {room_code} at {coin.seed_price}")

    async def ensure_player(
        self,
        room_code: str,
        display_name: str,
        pin: str,
        market_type: MarketType,
        identity: str,
    ) -> dict[str, Any]:
        existing = await players_repo.get_player_by_name(room_code, display_name, market_type)
        if existing is None:
            existing, created = await players_repo.create_player(
                room_code,
                player_identity=identity,
                market_type=market_type,
                player_code=player_code_for(identity, market_type),
                display_name=display_name,
                pin=pin,
                cash=self.config.starting_cash,
                coin_symbols=self.config.symbols,
            )
            if created:
                logger.info(f"Created player {existing['player_code']} in {room_code}")
                return existing

        if str(existing["pin"]) != pin:
            logger.warning(f"PIN mismatch for {display_name} in {room_code}")
            raise AuthorizationError("Invalid PIN")
        return existing

    async def join(self, room_code: str, display_name: str, pin: str) -> dict[str, Any]:
        room_code = (room_code or "").strip()
        display_name = (display_name or "").strip()
        pin = (pin or "").strip()
        if not room_code or not display_name or not pin:
            raise BadRequestError("Missing fields")

        await rooms_repo.ensure_room(room_code, self.config.default_spread_bps)
        await self.seed_prices(room_code)

        identity = player_identity(room_code, display_name)
        players = {
            market_type: await self.ensure_player(room_code, display_name, pin, market_type, identity)
            for market_type in MARKET_TYPES
        }
        season = players["season"]

        return {
            "ok": True,
            "room_code": room_code,
            "player_code": season["player_code"],
            "display_name": display_name,
            "cash": float(season["cash"]),
            "spread_bps": await self.room_spread(room_code),
            "player_codes": {
                market_type: player["player_code"] for market_type, player in players.items()
            },
        }

    async def resolve_player_code(
        self, room_code: str, player_code: str, market_type: MarketType
    ) -> Optional[str]:
        """Map a code issued for either market to the caller's row in ``market_type``."""
        exact = await players_repo.get_player_by_code(room_code, player_code, market_type)
        if exact:
            return player_code

        base = await players_repo.get_player_by_code(room_code, player_code)
        if not base or not base.get("player_identity"):
            return None

        mapped = await players_repo.get_player_by_identity(
            room_code, base["player_identity"], market_type
        )
        if not mapped or not mapped.get("player_code"):
            return None
        return mapped["player_code"]

    async def get_state(self, room_code: str, player_code: str, market_type: MarketType) -> dict[str, Any]:
        if not room_code or not player_code:
            raise BadRequestError("Missing params")

        resolved = await self.resolve_player_code(room_code, player_code, market_type)
        if not resolved:
            raise NotFoundError("Player not found")

        player = await players_repo.get_player_by_code(room_code, resolved, market_type)
        if not player:
            raise NotFoundError("Player not found")

        holdings = await holdings_repo.list_holdings(room_code, player["id"], market_type)

        return {
            "market_type": market_type,
            "cash": float(player["cash"]),
            "holdings": holdings,
            "spread_bps": await self.room_spread(room_code),
            "coins": [
                {"coin_symbol": coin.symbol, "player_label": coin.label}
                for coin in self.config.coins
            ],
        }
