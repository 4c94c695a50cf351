"""
Environment-driven settings.

Everything is read from environment variables once at startup (see
`main.create_app`). Bad values fall back to defaults instead of failing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import Request

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq's "sslmode" query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


@dataclass(frozen=True)
class Settings:
    storage_backend: str
    database_url: str
    db_pool_min_size: int
    db_pool_max_size: int
    db_command_timeout: float
    feed_default_limit: int
    feed_strict_cursor: bool
    cors_origins: tuple[str, ...]
    log_level: str


def load_settings() -> Settings:
    database_url = _env_str("DATABASE_URL")
    if database_url:
        database_url = sanitize_database_url(database_url)

    backend = _env_str("STORAGE_BACKEND", "postgres" if database_url else "memory").lower()

    return Settings(
        storage_backend=backend,
        database_url=database_url,
        db_pool_min_size=max(1, _env_int("DB_POOL_MIN_SIZE", 1)),
        db_pool_max_size=max(1, _env_int("DB_POOL_MAX_SIZE", 5)),
        db_command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
        feed_default_limit=_env_int("FEED_DEFAULT_LIMIT", 10),
        feed_strict_cursor=_env_bool("FEED_STRICT_CURSOR"),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
