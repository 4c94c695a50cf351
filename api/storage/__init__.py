"""
Record store backends.

`create_storage` picks a backend from settings. The instance is created once
in the app lifespan and reached through `get_storage` in request handlers.
"""

from __future__ import annotations

from fastapi import Request

from core.db import Database
from core.settings import Settings

from .base import DuplicateError, Row, Storage, StorageError
from .memory import MemoryStorage
from .postgres import PostgresStorage

__all__ = [
    "DuplicateError",
    "MemoryStorage",
    "PostgresStorage",
    "Row",
    "Storage",
    "StorageError",
    "create_storage",
    "get_storage",
]


def create_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "memory":
        return MemoryStorage()

    if settings.storage_backend == "postgres":
        db = Database(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        return PostgresStorage(db, create_schema=True)

    raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
