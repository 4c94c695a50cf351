"""
Record store interface shared by the storage backends.

Rows are plain dicts with snake_case keys (same shape as asyncpg records
converted with `dict(record)`). Feature services turn them into response
schemas.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable

from core.pagination import Boundary

Row = dict[str, Any]
Clock = Callable[[], datetime]


class StorageError(RuntimeError):
    """The record store could not be reached or rejected a query."""


class DuplicateError(StorageError):
    """A uniqueness rule (username, one like per user and video) was violated."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Storage(ABC):
    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    async def start(self) -> None:
        return None

    async def close(self) -> None:
        return None

    # Users

    @abstractmethod
    async def get_user(self, user_id: str) -> Row | None: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Row | None: ...

    @abstractmethod
    async def get_users(self, user_ids: list[str]) -> dict[str, Row]: ...

    @abstractmethod
    async def create_user(self, *, username: str, avatar_url: str | None = None, bio: str | None = None) -> Row: ...

    # Videos

    @abstractmethod
    async def get_video(self, video_id: str) -> Row | None: ...

    @abstractmethod
    async def list_videos_by_user(self, user_id: str) -> list[Row]: ...

    @abstractmethod
    async def list_trending_videos(self, *, limit: int = 10) -> list[Row]: ...

    @abstractmethod
    async def fetch_candidates(self, boundary: Boundary | None, count: int) -> list[Row]:
        """
        Feed candidates strictly after `boundary`, ordered by
        (created_at DESC, id DESC), at most `count` rows.
        """

    @abstractmethod
    async def create_video(
        self,
        *,
        user_id: str,
        video_url: str,
        thumbnail_url: str | None = None,
        caption: str | None = None,
        sound_name: str | None = None,
    ) -> Row: ...

    @abstractmethod
    async def increment_video_views(self, video_id: str) -> None: ...

    # Comments

    @abstractmethod
    async def list_comments_by_video(self, video_id: str) -> list[Row]: ...

    @abstractmethod
    async def create_comment(self, *, video_id: str, user_id: str, text: str) -> Row: ...

    # Likes

    @abstractmethod
    async def get_like_by_user_and_video(self, *, user_id: str, video_id: str) -> Row | None: ...

    @abstractmethod
    async def create_like(self, *, video_id: str, user_id: str) -> Row: ...

    @abstractmethod
    async def delete_like(self, like_id: str) -> None: ...
