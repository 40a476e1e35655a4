from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Any, Iterable, Sequence

from settings import get_settings

_DEFAULT_EXTRA_KEYS = (
    "period",
    "sensor_id",
    "bucket_count",
    "reading_count",
    "sensor_count",
    "range_start",
    "range_end",
    "row_number",
    "reason",
    "error_count",
    "timestamp",
    "duration_ms",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    """Appends selected ``extra=`` attributes to each line as ``key=value`` pairs."""

    # Timestamps are rendered with a trailing "Z", so they must be UTC.
    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _DEFAULT_EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts = [
            f"{key}={value}"
            for key, value in self._context(record)
        ]
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message

    def _context(self, record: logging.LogRecord) -> Iterable[tuple[str, Any]]:
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is not None:
                yield key, value


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Configure application-wide logging with contextual formatting."""
    global _configured
    if _configured and not force:
        return

    settings = get_settings()
    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
