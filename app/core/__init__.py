"""Core infrastructure: settings, logging, exceptions."""

from .config import settings
from .exceptions import (
    AppException,
    AuthorizationError,
    BadRequestError,
    NotFoundError,
    StatsApiError,
    TradeError,
    UpstreamError,
)
from .logging import get_logger, setup_logging


__all__ = [
    "AppException",
    "AuthorizationError",
    "BadRequestError",
    "NotFoundError",
    "StatsApiError",
    "TradeError",
    "UpstreamError",
    "get_logger",
    "settings",
    "setup_logging",
]
