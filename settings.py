from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_DATABASE_URL_ENV = "DATABASE_URL"
_DATABASE_ECHO_ENV = "DATABASE_ECHO"
_API_PREFIX_ENV = "API_PREFIX"
_DEFAULT_PAGE_LIMIT_ENV = "DEFAULT_PAGE_LIMIT"
_MAX_PAGE_LIMIT_ENV = "MAX_PAGE_LIMIT"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_echo: bool
    api_prefix: str
    default_page_limit: int
    max_page_limit: int
    cors_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if not candidate:
        return default
    return candidate in _TRUTHY


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_prefix(default: str) -> str:
    value = os.getenv(_API_PREFIX_ENV)
    if value is None:
        return default
    candidate = value.strip().strip("/")
    # An explicitly empty prefix mounts the API at the root.
    return f"/{candidate}" if candidate else ""


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


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
    default_limit = _read_positive_int(_DEFAULT_PAGE_LIMIT_ENV, 10)
    max_limit = _read_positive_int(_MAX_PAGE_LIMIT_ENV, 100)
    return Settings(
        database_url=_read_str_env(_DATABASE_URL_ENV, "sqlite:///./tmp/geoseis.db"),
        database_echo=_read_bool_env(_DATABASE_ECHO_ENV, False),
        api_prefix=_read_prefix("/api"),
        default_page_limit=min(default_limit, max_limit),
        max_page_limit=max_limit,
        cors_origins=_read_origins(("http://localhost:5173", "http://localhost:3000")),
        log_level=_read_log_level("INFO"),
    )
