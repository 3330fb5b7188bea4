from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_HOST_ENV = "METRICAL_HOST"
_PORT_ENV = "METRICAL_PORT"
_DB_PATH_ENV = "METRICAL_DB_PATH"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_PORT = 4340


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    db_path: Optional[str]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        host=_read_str_env(_HOST_ENV, "127.0.0.1"),
        port=_read_port(DEFAULT_PORT),
        db_path=_read_optional_env(_DB_PATH_ENV, None),
        log_level=_read_log_level("INFO"),
    )
