"""API routes package."""

from . import (
    fortnite,
    health,
    market,
    rooms,
    trade,
)


__all__ = [
    "fortnite",
    "health",
    "market",
    "rooms",
    "trade",
]
