"""Logging for the market service.

Two output formats, picked by ``LOG_FORMAT``:

- ``json``: one object per line with timestamp, level, logger, message, the
  current request id and any structured fields passed via :func:`log_fields`.
- ``text``: a single readable line, structured fields appended as ``k=v``.

PINs and API keys are scrubbed from both the message and the structured
fields before a record reaches a handler.

Usage:
    from app.core.logging import get_logger, log_fields

    logger = get_logger("services.trading")
    logger.info("Trade settled", extra=log_fields(coin="JUANO", qty=2))
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import settings


LOGGER_PREFIX = "statcoin"
REDACTED = "[REDACTED]"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def log_fields(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra`` mapping that carries structured fields into a record."""
    return {"extra_fields": fields}


def _fields_of(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "extra_fields", None)
    return fields if isinstance(fields, dict) else {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        for key, value in _fields_of(record).items():
            log_data.setdefault(key, value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if settings.debug:
            log_data["location"] = f"{record.filename}:{record.lineno} in {record.funcName}"

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """``2026-03-01 18:00:00 INFO     [1a2b3c4d] statcoin.api: message k=v``"""

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get()
        rid = f"[{request_id[:8]}] " if request_id else ""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{timestamp} {record.levelname:8} {rid}{record.name}: {record.getMessage()}"

        fields = _fields_of(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class SensitiveDataFilter(logging.Filter):
    """Scrub PINs and credentials from messages and structured fields."""

    SENSITIVE_KEYS = frozenset({
        "pin",
        "authorization",
        "api_key",
        "fortnite_api_key",
        "password",
        "token",
        "secret",
    })

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        lowered = message.lower()
        hits = [key for key in self.SENSITIVE_KEYS if key in lowered]
        if hits:
            for key in hits:
                message = self._redact_value(message, key)
            # args are already merged into message
            record.msg, record.args = message, None

        fields = _fields_of(record)
        if any(key.lower() in self.SENSITIVE_KEYS for key in fields):
            record.extra_fields = {
                key: REDACTED if key.lower() in self.SENSITIVE_KEYS else value
                for key, value in fields.items()
            }
        return True

    @staticmethod
    def _redact_value(text: str, key: str) -> str:
        # key=value, key: value, 'key': value, "key": value
        for pattern in (
            rf"(\b{key}\s*[=:]\s*)[^\s,}}\]]+",
            rf"('{key}'\s*:\s*)[^\s,}}\]]+",
            rf'("{key}"\s*:\s*)[^\s,}}\]]+',
        ):
            text = re.sub(pattern, rf"\1{REDACTED}", text, flags=re.IGNORECASE)
        return text


def setup_logging() -> None:
    """Install a single stdout handler on the root logger."""
    level = getattr(logging, settings.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if settings.log_format == "json" else TextFormatter())
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)

    # Access lines duplicate RequestLoggingMiddleware; httpx would log the stats URL.
    for noisy in ("uvicorn.access", "httpx", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``statcoin`` namespace."""
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")
