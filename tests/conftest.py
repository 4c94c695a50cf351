"""Shared fixtures: a fresh in-memory store and an app bound to it."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Importing `main` builds a module-level app; keep it off Postgres.
os.environ["STORAGE_BACKEND"] = "memory"

from core.settings import Settings  # noqa: E402
from main import create_app  # noqa: E402
from storage import MemoryStorage  # noqa: E402

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TickingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        self.current += self.step
        return self.current


def make_settings(**overrides) -> Settings:
    values = {
        "storage_backend": "memory",
        "database_url": "",
        "db_pool_min_size": 1,
        "db_pool_max_size": 5,
        "db_command_timeout": 30.0,
        "feed_default_limit": 10,
        "feed_strict_cursor": False,
        "cors_origins": ("http://localhost:5173",),
        "log_level": "INFO",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def storage(clock: TickingClock) -> MemoryStorage:
    return MemoryStorage(clock=clock)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings, storage: MemoryStorage):
    return create_app(settings, storage)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def author(storage: MemoryStorage) -> dict:
    return await storage.create_user(username="dance_6", bio="Professional dancer")
