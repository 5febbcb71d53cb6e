"""Atomic trade execution.

``TradeExecutor`` is the capability the trade dispatcher depends on.
``SqlTradeExecutor`` implements it with one database transaction that locks the
player and holding rows, so concurrent trades of one player serialize.

Execution price applies half the room spread on each side of the mid:

    buy  = mid * (1 + spread_bps / 2 / 10_000)
    sell = mid * (1 - spread_bps / 2 / 10_000)

The execution price is appended to the price series as a ``trade`` tick and
becomes the new mid.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from sqlalchemy import desc, select

from app.core.exceptions import TradeError
from app.core.logging import get_logger, log_fields
from app.database.connection import get_session
from app.database.orm import Holding, PriceTick, Room, RoomPlayer
from app.domain.catalog import MarketConfig
from app.domain.market import MarketType, TradeSide

logger = get_logger("services.trade_executor")

CENT = Decimal("0.01")
BPS_PER_SIDE_DIVISOR = Decimal("20000")
QTY_STEP = Decimal("0.00000001")


@dataclass(frozen=True)
class TradeOutcome:
    exec_price: float
    new_mid: float
    cash: float
    holding_qty: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "exec_price": self.exec_price,
            "new_mid": self.new_mid,
            "cash": self.cash,
            "holding_qty": self.holding_qty,
        }


@dataclass(frozen=True)
class Settlement:
    exec_price: Decimal
    cash: Decimal
    holding_qty: Decimal


class TradeExecutor(Protocol):
    async def execute(
        self,
        room_code: str,
        player_code: str,
        market_type: MarketType,
        side: TradeSide,
        coin_symbol: str,
        qty: float,
    ) -> TradeOutcome:
        """Execute a trade atomically or raise TradeError."""
        ...


def execution_price(mid: Decimal, spread_bps: int, side: TradeSide) -> Decimal:
    """Mid skewed by half the spread, rounded to cents."""
    skew = Decimal(spread_bps) / BPS_PER_SIDE_DIVISOR
    factor = Decimal(1) + skew if side == "buy" else Decimal(1) - skew
    return (mid * factor).quantize(CENT, rounding=ROUND_HALF_UP)


def settle_trade(
    side: TradeSide,
    qty: Decimal,
    mid: Decimal,
    spread_bps: int,
    cash: Decimal,
    holding_qty: Decimal,
) -> Settlement:
    """New cash and holding after a trade. Raises TradeError if it is not affordable."""
    price = execution_price(mid, spread_bps, side)
    notional = (price * qty).quantize(CENT, rounding=ROUND_HALF_UP)

    if side == "buy":
        if cash < notional:
            raise TradeError("Insufficient cash")
        return Settlement(exec_price=price, cash=cash - notional, holding_qty=holding_qty + qty)

    if holding_qty < qty:
        raise TradeError("Insufficient holdings")
    return Settlement(exec_price=price, cash=cash + notional, holding_qty=holding_qty - qty)


class SqlTradeExecutor:
    """TradeExecutor backed by the ORM tables, one transaction per trade."""

    def __init__(self, config: MarketConfig):
        self.config = config

    async def execute(
        self,
        room_code: str,
        player_code: str,
        market_type: MarketType,
        side: TradeSide,
        coin_symbol: str,
        qty: float,
    ) -> TradeOutcome:
        coin = self.config.coin(coin_symbol)
        if coin is None:
            raise TradeError("Unknown coin")
        # holdings.qty is Numeric(24, 8)
        quantity = Decimal(str(qty)).quantize(QTY_STEP, rounding=ROUND_HALF_UP)
        if quantity <= 0:
            raise TradeError("Missing fields")

        async with get_session() as session:
            player = (
                await session.execute(
                    select(RoomPlayer)
                    .where(
                        RoomPlayer.room_code == room_code,
                        RoomPlayer.player_code == player_code,
                        RoomPlayer.market_type == market_type,
                    )
                    .with_for_update()
                )
            ).scalar_one_or_none()
            if player is None:
                raise TradeError("Player not found")

            room = await session.get(Room, room_code)
            spread_bps = room.spread_bps if room and room.spread_bps else self.config.default_spread_bps

            latest = (
                await session.execute(
                    select(PriceTick.price)
                    .where(
                        PriceTick.room_code == room_code,
                        PriceTick.coin_symbol == coin.symbol,
                        PriceTick.market_type == market_type,
                    )
                    .order_by(desc(PriceTick.created_at), desc(PriceTick.id))
                    .limit(1)
                )
            ).scalar_one_or_none()
            mid = Decimal(latest) if latest is not None else Decimal(str(coin.seed_price))

            holding = (
                await session.execute(
                    select(Holding)
                    .where(
                        Holding.player_id == player.id,
                        Holding.coin_symbol == coin.symbol,
                        Holding.market_type == market_type,
                    )
                    .with_for_update()
                )
            ).scalar_one_or_none()
            if holding is None:
                holding = Holding(
                    room_code=room_code,
                    player_id=player.id,
                    coin_symbol=coin.symbol,
                    market_type=market_type,
                    qty=Decimal("0"),
                )
                session.add(holding)

            settlement = settle_trade(side, quantity, mid, spread_bps, Decimal(player.cash), Decimal(holding.qty))

            player.cash = settlement.cash
            holding.qty = settlement.holding_qty
            session.add(
                PriceTick(
                    room_code=room_code,
                    coin_symbol=coin.symbol,
                    market_type=market_type,
                    price=settlement.exec_price,
                    source="trade",
                )
            )
            await session.commit()

        logger.info(
            f"{side} {quantity} {coin.symbol} by {player_code} in {room_code}/{market_type} "
            f"at {settlement.exec_price} (mid {mid}, spread {spread_bps}bps)",
            extra=log_fields(
                room_code=room_code,
                market_type=market_type,
                side=side,
                coin=coin.symbol,
                qty=quantity,
                exec_price=settlement.exec_price,
            ),
        )
        return TradeOutcome(
            exec_price=float(settlement.exec_price),
            new_mid=float(settlement.exec_price),
            cash=float(settlement.cash),
            holding_qty=float(settlement.holding_qty),
        )
