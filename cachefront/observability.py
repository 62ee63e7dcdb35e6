"""
Cachefront - Logging Setup

Cachefront modules log through ``logging.getLogger(__name__)`` and never
install handlers on import. Applications call ``setup_logging`` once at
startup to attach a plain or JSON formatted handler to the ``cachefront``
logger.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .config import Environment, LogLevel, get_config

_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Fields passed through extra={...}
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(
    level: LogLevel | str | None = None,
    json_format: bool | None = None,
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling it again replaces the previous handler.

    Args:
        level: Log level name (any case) or LogLevel; defaults to the
            configured ``LOG_LEVEL``
        json_format: Emit one JSON object per record instead of plain text;
            defaults to True in the production environment

    Returns:
        The configured ``cachefront`` logger
    """
    if level is None or json_format is None:
        config = get_config()
        if level is None:
            level = config.log_level
        if json_format is None:
            json_format = config.environment == Environment.PRODUCTION

    logger = logging.getLogger("cachefront")
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))
    logger.addHandler(handler)
    level_name = level.value if isinstance(level, LogLevel) else level.upper()
    logger.setLevel(LogLevel(level_name).value)

    return logger
