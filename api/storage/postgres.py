"""
PostgreSQL record store (raw SQL over asyncpg).

Every query goes through `_fetch_one` / `_fetch_all` / `_execute` / `_insert`,
which turn driver and connection failures into `StorageError`. `_insert` maps
unique-constraint violations to `DuplicateError`. No retries here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import asyncpg

from core import pagination
from core.db import Database
from core.pagination import Boundary

from .base import Clock, DuplicateError, Row, Storage, StorageError, new_id

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, username, avatar_url, bio, followers_count, following_count, likes_count"
VIDEO_COLUMNS = (
    "id, user_id, video_url, thumbnail_url, caption, sound_name, "
    "likes_count, comments_count, views_count, created_at"
)
COMMENT_COLUMNS = "id, video_id, user_id, text, created_at"
LIKE_COLUMNS = "id, video_id, user_id, created_at"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id varchar PRIMARY KEY,
    username text NOT NULL UNIQUE,
    avatar_url text,
    bio text,
    followers_count integer NOT NULL DEFAULT 0,
    following_count integer NOT NULL DEFAULT 0,
    likes_count integer NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS videos (
    id varchar PRIMARY KEY,
    user_id varchar NOT NULL,
    video_url text NOT NULL,
    thumbnail_url text,
    caption text,
    sound_name text,
    likes_count integer NOT NULL DEFAULT 0,
    comments_count integer NOT NULL DEFAULT 0,
    views_count integer NOT NULL DEFAULT 0,
    created_at timestamptz NOT NULL
);

CREATE INDEX IF NOT EXISTS videos_feed_idx
    ON videos (created_at DESC, id COLLATE "C" DESC);
CREATE INDEX IF NOT EXISTS videos_user_idx ON videos (user_id, created_at DESC);

CREATE TABLE IF NOT EXISTS comments (
    id varchar PRIMARY KEY,
    video_id varchar NOT NULL,
    user_id varchar NOT NULL,
    text text NOT NULL,
    created_at timestamptz NOT NULL
);

CREATE INDEX IF NOT EXISTS comments_video_idx ON comments (video_id, created_at DESC);

CREATE TABLE IF NOT EXISTS likes (
    id varchar PRIMARY KEY,
    video_id varchar NOT NULL,
    user_id varchar NOT NULL,
    created_at timestamptz NOT NULL
);

DROP INDEX IF EXISTS likes_user_video_idx;
CREATE UNIQUE INDEX IF NOT EXISTS likes_user_video_key ON likes (user_id, video_id);
"""

_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresStorage(Storage):
    def __init__(self, db: Database, *, clock: Clock | None = None, create_schema: bool = False) -> None:
        super().__init__(clock=clock)
        self.db = db
        self.create_schema = create_schema

    async def start(self) -> None:
        try:
            await self.db.connect()
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"Failed to connect to Postgres: {exc}") from exc
        if self.create_schema:
            await self.ensure_schema()

    async def close(self) -> None:
        await self.db.close()

    async def ensure_schema(self) -> None:
        await self._execute(SCHEMA_SQL)
        logger.info("schema_ready tables=users,videos,comments,likes")

    async def _fetch_one(self, sql: str, *args: Any) -> Row | None:
        try:
            return await self.db.fetch_one(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"Postgres query failed: {exc}") from exc

    async def _fetch_all(self, sql: str, *args: Any) -> list[Row]:
        try:
            return await self.db.fetch_all(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"Postgres query failed: {exc}") from exc

    async def _execute(self, sql: str, *args: Any) -> None:
        try:
            await self.db.execute(sql, *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"Postgres statement failed: {exc}") from exc

    async def _insert(self, sql: str, *args: Any) -> Row:
        try:
            row = await self.db.fetch_one(sql, *args)
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateError(f"Duplicate row: {exc}") from exc
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"Postgres insert failed: {exc}") from exc
        if row is None:
            raise StorageError("Insert returned no row.")
        return row

    # Users

    async def get_user(self, user_id: str) -> Row | None:
        return await self._fetch_one(
            f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE id = $1
            LIMIT 1
            """,
            user_id,
        )

    async def get_user_by_username(self, username: str) -> Row | None:
        return await self._fetch_one(
            f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE username = $1
            LIMIT 1
            """,
            username,
        )

    async def get_users(self, user_ids: list[str]) -> dict[str, Row]:
        unique_ids = sorted(set(user_ids))
        if not unique_ids:
            return {}
        rows = await self._fetch_all(
            f"""
            SELECT {USER_COLUMNS}
            FROM users
            WHERE id = ANY($1::varchar[])
            """,
            unique_ids,
        )
        return {str(row["id"]): row for row in rows}

    async def create_user(self, *, username: str, avatar_url: str | None = None, bio: str | None = None) -> Row:
        return await self._insert(
            f"""
            INSERT INTO users (id, username, avatar_url, bio)
            VALUES ($1, $2, $3, $4)
            RETURNING {USER_COLUMNS}
            """,
            new_id(),
            username,
            avatar_url,
            bio,
        )

    # Videos

    async def get_video(self, video_id: str) -> Row | None:
        return await self._fetch_one(
            f"""
            SELECT {VIDEO_COLUMNS}
            FROM videos
            WHERE id = $1
            LIMIT 1
            """,
            video_id,
        )

    async def list_videos_by_user(self, user_id: str) -> list[Row]:
        return await self._fetch_all(
            f"""
            SELECT {VIDEO_COLUMNS}
            FROM videos
            WHERE user_id = $1
            ORDER BY {pagination.order_by_clause()}
            """,
            user_id,
        )

    async def list_trending_videos(self, *, limit: int = 10) -> list[Row]:
        return await self._fetch_all(
            f"""
            SELECT {VIDEO_COLUMNS}
            FROM videos
            ORDER BY views_count DESC, {pagination.order_by_clause()}
            LIMIT $1
            """,
            limit,
        )

    async def fetch_candidates(self, boundary: Boundary | None, count: int) -> list[Row]:
        if boundary is None:
            return await self._fetch_all(
                f"""
                SELECT {VIDEO_COLUMNS}
                FROM videos
                ORDER BY {pagination.order_by_clause()}
                LIMIT $1
                """,
                count,
            )

        return await self._fetch_all(
            f"""
            SELECT {VIDEO_COLUMNS}
            FROM videos
            WHERE {pagination.seek_clause(1, 2)}
            ORDER BY {pagination.order_by_clause()}
            LIMIT $3
            """,
            boundary.created_at,
            boundary.id,
            count,
        )

    async def create_video(
        self,
        *,
        user_id: str,
        video_url: str,
        thumbnail_url: str | None = None,
        caption: str | None = None,
        sound_name: str | None = None,
    ) -> Row:
        return await self._insert(
            f"""
            INSERT INTO videos (id, user_id, video_url, thumbnail_url, caption, sound_name, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING {VIDEO_COLUMNS}
            """,
            new_id(),
            user_id,
            video_url,
            thumbnail_url,
            caption,
            sound_name,
            self.now(),
        )

    async def increment_video_views(self, video_id: str) -> None:
        await self._execute(
            """
            UPDATE videos
            SET views_count = views_count + 1
            WHERE id = $1
            """,
            video_id,
        )

    # Comments

    async def list_comments_by_video(self, video_id: str) -> list[Row]:
        return await self._fetch_all(
            f"""
            SELECT {COMMENT_COLUMNS}
            FROM comments
            WHERE video_id = $1
            ORDER BY {pagination.order_by_clause()}
            """,
            video_id,
        )

    async def create_comment(self, *, video_id: str, user_id: str, text: str) -> Row:
        return await self._insert(
            f"""
            WITH inserted AS (
                INSERT INTO comments (id, video_id, user_id, text, created_at)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMMENT_COLUMNS}
            ),
            bumped AS (
                UPDATE videos
                SET comments_count = comments_count + 1
                WHERE id = $2
                RETURNING id
            )
            SELECT {COMMENT_COLUMNS}
            FROM inserted
            """,
            new_id(),
            video_id,
            user_id,
            text,
            self.now(),
        )

    # Likes

    async def get_like_by_user_and_video(self, *, user_id: str, video_id: str) -> Row | None:
        return await self._fetch_one(
            f"""
            SELECT {LIKE_COLUMNS}
            FROM likes
            WHERE user_id = $1
              AND video_id = $2
            LIMIT 1
            """,
            user_id,
            video_id,
        )

    async def create_like(self, *, video_id: str, user_id: str) -> Row:
        return await self._insert(
            f"""
            WITH inserted AS (
                INSERT INTO likes (id, video_id, user_id, created_at)
                VALUES ($1, $2, $3, $4)
                RETURNING {LIKE_COLUMNS}
            ),
            bumped AS (
                UPDATE videos
                SET likes_count = likes_count + 1
                WHERE id = $2
                RETURNING id
            )
            SELECT {LIKE_COLUMNS}
            FROM inserted
            """,
            new_id(),
            video_id,
            user_id,
            self.now(),
        )

    async def delete_like(self, like_id: str) -> None:
        await self._execute(
            """
            WITH deleted AS (
                DELETE FROM likes
                WHERE id = $1
                RETURNING video_id
            )
            UPDATE videos
            SET likes_count = likes_count - 1
            WHERE id IN (SELECT video_id FROM deleted)
              AND likes_count > 0
            """,
            like_id,
        )
