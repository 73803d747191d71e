"""
JSON logging for the booking backend.

Every record is stamped with the current request's correlation id by
``CorrelationIdFilter`` and rendered as one JSON object per line. Structured
fields go through ``log_with_context`` (or ``extra={"extra_fields": ...}``)
and are merged into the top level of the object.

Level and format come from ``settings.log_level`` / ``settings.log_json``.
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional, Union

from tailorbook.lib.settings import settings


_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Record attributes that are never copied into the JSON body
_RESERVED_KEYS = ("timestamp", "level", "logger", "message")

QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


class CorrelationIdFilter(logging.Filter):
    """Attach the active correlation id (or None) to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            entry["correlation_id"] = correlation_id

        for key, value in getattr(record, "extra_fields", {}).items():
            if key not in _RESERVED_KEYS:
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_format: bool = True) -> logging.Handler:
    """Install a single stdout handler on the root logger and return it."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def log_with_context(
    logger: logging.Logger,
    level: Union[str, int],
    message: str,
    **fields: Any,
) -> None:
    """Log ``message`` with ``fields`` as top-level JSON keys.

    ``level`` is a level name ("info", "error") or a logging constant.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.log(level, message, extra={"extra_fields": fields})


setup_logging(
    level="DEBUG" if settings.debug else settings.log_level,
    json_format=settings.log_json,
)
