from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Sequence

from settings import get_settings

_CONTEXT_KEYS = (
    "timestamp",
    "sample_count",
    "series_count",
    "path",
    "reason",
)

_QUIET_LOGGERS = ("uvicorn.access",)

_configured = False


class ContextualFormatter(logging.Formatter):
    """Render ``extra`` fields as ``key=value`` pairs after the message.

    ``metric_name`` and ``metric_key`` collapse into a single ``series=name/key``
    field so one series reads the same in every log line.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._context_keys: Sequence[str] = tuple(extra_keys or _CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = self._context(record)
        return f"{message} | {' '.join(context)}" if context else message

    def _context(self, record: logging.LogRecord) -> list[str]:
        parts: list[str] = []
        name = getattr(record, "metric_name", None)
        key = getattr(record, "metric_key", None)
        if name is not None or key is not None:
            parts.append(f"series={name or '-'}/{key or '-'}")
        for field in self._context_keys:
            value = getattr(record, field, None)
            if value is not None:
                parts.append(f"{field}={value}")
        return parts


def resolve_level(level: str | int | None) -> int:
    """Map a level name or number to a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Install the contextual stderr handler on the root logger once per process."""
    global _configured
    if _configured and not force:
        return

    log_level = resolve_level(level if level is not None else get_settings().log_level)

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)sZ | %(levelname)-7s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "contextual",
                }
            },
            "loggers": {
                name: {"level": max(log_level, logging.WARNING)} for name in _QUIET_LOGGERS
            },
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )

    _configured = True
