"""Tests for the Postgres backend against a recording stand-in for `Database`."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import asyncpg
import pytest

from core import pagination
from storage import DuplicateError, PostgresStorage, StorageError

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


class RecordingDatabase:
    def __init__(self, rows: list[dict] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, str, tuple]] = []
        self.connected = False

    async def connect(self) -> None:
        if self.error is not None:
            raise self.error
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    def _record(self, kind: str, sql: str, args: tuple) -> None:
        self.calls.append((kind, " ".join(sql.split()), args))
        if self.error is not None:
            raise self.error

    async def fetch_one(self, sql, *args):
        self._record("fetch_one", sql, args)
        return dict(self.rows[0]) if self.rows else None

    async def fetch_all(self, sql, *args):
        self._record("fetch_all", sql, args)
        return [dict(r) for r in self.rows]

    async def execute(self, sql, *args):
        self._record("execute", sql, args)


def _video_rows(count: int) -> list[dict]:
    return [
        {"id": f"video-{i}", "user_id": "user-1", "created_at": BASE - timedelta(seconds=i)}
        for i in range(1, count + 1)
    ]


async def test_first_page_query_has_no_seek_condition():
    db = RecordingDatabase(rows=_video_rows(3))
    storage = PostgresStorage(db)

    await storage.fetch_candidates(None, 6)

    [(kind, sql, args)] = db.calls
    assert kind == "fetch_all"
    assert "WHERE" not in sql
    assert 'ORDER BY created_at DESC, id COLLATE "C" DESC LIMIT $1' in sql
    assert args == (6,)


async def test_continuation_query_binds_boundary():
    db = RecordingDatabase()
    storage = PostgresStorage(db)
    boundary = pagination.Boundary(BASE, "video-9")

    await storage.fetch_candidates(boundary, 11)

    [(_, sql, args)] = db.calls
    assert pagination.seek_clause(1, 2) in sql
    assert "LIMIT $3" in sql
    assert args == (BASE, "video-9", 11)


async def test_fetch_page_over_postgres_backend():
    db = RecordingDatabase(rows=_video_rows(6))
    storage = PostgresStorage(db)

    page = await pagination.fetch_page(storage, 5)

    assert [r["id"] for r in page.items] == [f"video-{i}" for i in range(1, 6)]
    assert page.next_cursor == pagination.encode_cursor(BASE - timedelta(seconds=5), "video-5")
    assert db.calls[0][2] == (6,)


async def test_driver_failures_become_storage_errors():
    storage = PostgresStorage(RecordingDatabase(error=ConnectionRefusedError("refused")))

    with pytest.raises(StorageError):
        await storage.fetch_candidates(None, 2)


async def test_start_creates_schema_when_asked():
    db = RecordingDatabase()
    storage = PostgresStorage(db, create_schema=True)

    await storage.start()

    assert db.connected
    [(kind, sql, _)] = db.calls
    assert kind == "execute"
    assert "CREATE TABLE IF NOT EXISTS videos" in sql
    assert "videos_feed_idx" in sql
    assert "CREATE UNIQUE INDEX IF NOT EXISTS likes_user_video_key ON likes (user_id, video_id)" in sql


async def test_start_wraps_connection_failure():
    storage = PostgresStorage(RecordingDatabase(error=OSError("no route to host")))

    with pytest.raises(StorageError):
        await storage.start()


async def test_create_video_stamps_time_from_clock():
    db = RecordingDatabase(rows=_video_rows(1))
    storage = PostgresStorage(db, clock=lambda: BASE)

    await storage.create_video(user_id="user-1", video_url="https://cdn.test/a.mp4")

    [(kind, sql, args)] = db.calls
    assert kind == "fetch_one"
    assert sql.startswith("INSERT INTO videos")
    assert args[1:] == ("user-1", "https://cdn.test/a.mp4", None, None, None, BASE)


async def test_get_users_skips_query_for_empty_input():
    db = RecordingDatabase()

    assert await PostgresStorage(db).get_users([]) == {}
    assert db.calls == []


async def test_duplicate_like_insert_raises_duplicate_error():
    storage = PostgresStorage(RecordingDatabase(error=asyncpg.UniqueViolationError("duplicate key")))

    with pytest.raises(DuplicateError):
        await storage.create_like(video_id="video-1", user_id="user-1")


async def test_duplicate_username_insert_raises_duplicate_error():
    storage = PostgresStorage(RecordingDatabase(error=asyncpg.UniqueViolationError("duplicate key")))

    with pytest.raises(DuplicateError):
        await storage.create_user(username="dance_6")


async def test_other_insert_failures_stay_generic_storage_errors():
    storage = PostgresStorage(RecordingDatabase(error=ConnectionResetError("reset")))

    with pytest.raises(StorageError) as excinfo:
        await storage.create_like(video_id="video-1", user_id="user-1")
    assert not isinstance(excinfo.value, DuplicateError)
