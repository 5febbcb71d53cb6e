"""Data access layer repositories.

Each repository module provides async functions for database operations.
All code uses SQLAlchemy ORM models from `app.database.orm` with the
`get_session()` context manager.

ORM-based repositories:
- rooms_orm: rooms and their spread
- players_orm: per-market player records
- holdings_orm: coin quantities per player
- prices_orm: append-only price ticks
- stats_cache_orm: Fortnite stats TTL cache
"""

from . import holdings_orm
from . import players_orm
from . import prices_orm
from . import rooms_orm
from . import stats_cache_orm

__all__ = [
    "holdings_orm",
    "players_orm",
    "prices_orm",
    "rooms_orm",
    "stats_cache_orm",
]
