"""Logging setup for the retrier namespace.

Library modules log through stdlib loggers (retrier.retry, retrier.backoff)
and never configure handlers themselves. Applications that want the output
call configure_logging() once at startup.

Example:
    >>> from retrier.runtime.observability import configure_logging
    >>> configure_logging()               # from RETRIER_LOG_* settings
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from retrier.foundation.config import LoggingSettings, get_settings

ROOT_LOGGER = "retrier"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, include_timestamps: bool = True) -> None:
        super().__init__()
        self.include_timestamps = include_timestamps

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if self.include_timestamps:
            entry["timestamp"] = self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - shadows builtin but matches stdlib
    *,
    settings: LoggingSettings | None = None,
    output: TextIO | None = None,
) -> logging.Logger:
    """Attach a single handler to the retrier logger. Explicit arguments override settings.

    Raises:
        ValueError: On an unknown format
    """
    s = settings or get_settings().logging
    level = (level or s.level).upper()
    fmt = format or s.format

    match fmt:
        case "text":
            pattern = "%(asctime)s [%(levelname)s] %(name)s: %(message)s" if s.include_timestamps else "[%(levelname)s] %(name)s: %(message)s"
            formatter: logging.Formatter = logging.Formatter(pattern)
        case "json":
            formatter = JsonFormatter(include_timestamps=s.include_timestamps)
        case _:
            raise ValueError(f"Unknown format: {fmt}. Use 'text' or 'json'")

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.WARNING))
    logger.propagate = False
    return logger
