"""Business logic services."""

from . import fortnite_stats, fundamentals, market, pricing, rooms, trade_executor, trading


__all__ = [
    "fortnite_stats",
    "fundamentals",
    "market",
    "pricing",
    "rooms",
    "trade_executor",
    "trading",
]
