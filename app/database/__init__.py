"""Database module: SQLAlchemy async engine, sessions and ORM models.

Use the ORM with get_session().
"""

from .connection import (
    close_sqlalchemy_engine,
    db_healthcheck,
    get_async_database_url,
    get_engine,
    get_session,
    init_sqlalchemy_engine,
)
from .orm import (
    Base,
    FortniteStatsCache,
    Holding,
    PriceTick,
    Room,
    RoomPlayer,
)


__all__ = [
    # Connection
    "close_sqlalchemy_engine",
    "db_healthcheck",
    "get_async_database_url",
    "get_engine",
    "get_session",
    "init_sqlalchemy_engine",
    # ORM
    "Base",
    "FortniteStatsCache",
    "Holding",
    "PriceTick",
    "Room",
    "RoomPlayer",
]
