"""
Logging setup for BoomBox.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers. Applications (and the CLI) call configure_logging()
once to get either human-readable lines or one JSON object per record.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }[self.value]


# Attributes every LogRecord has; anything else came in via extra=
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format records as single-line JSON.

    Output:
        {"level": "error", "logger": "boombox.mixer",
         "message": "unknown channel sfx", "timestamp": 1700000000.0,
         "thread_name": "MainThread"}

    Fields passed with ``extra=`` are merged into the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": record.created,
            "thread_name": record.threadName,
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class HumanFormatter(logging.Formatter):
    """Format records as ``[time] [LEVEL] [logger] message``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(record.created))
        line = f"[{timestamp}] [{record.levelname}] [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the ``boombox`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level.
        output: Output stream (default: stderr).
        json_format: Use JSON format.

    Returns:
        The configured ``boombox`` logger.
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    logger = logging.getLogger("boombox")
    for handler in list(logger.handlers):
        if getattr(handler, "_boombox_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else HumanFormatter())
    handler._boombox_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(level.numeric)
    return logger
