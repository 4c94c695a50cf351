"""
In-process record store.

Used for tests and local development. Each instance owns its own tables;
nothing is shared at module level. Mutations complete within a single event
loop step, so no locking is needed.
"""

from __future__ import annotations

from core import pagination
from core.pagination import Boundary

from .base import Clock, DuplicateError, Row, Storage, new_id


class MemoryStorage(Storage):
    def __init__(self, *, clock: Clock | None = None) -> None:
        super().__init__(clock=clock)
        self.users: dict[str, Row] = {}
        self.videos: dict[str, Row] = {}
        self.comments: dict[str, Row] = {}
        self.likes: dict[str, Row] = {}

    # Users

    async def get_user(self, user_id: str) -> Row | None:
        row = self.users.get(user_id)
        return dict(row) if row is not None else None

    async def get_user_by_username(self, username: str) -> Row | None:
        for row in self.users.values():
            if row["username"] == username:
                return dict(row)
        return None

    async def get_users(self, user_ids: list[str]) -> dict[str, Row]:
        return {uid: dict(self.users[uid]) for uid in set(user_ids) if uid in self.users}

    async def create_user(self, *, username: str, avatar_url: str | None = None, bio: str | None = None) -> Row:
        if any(r["username"] == username for r in self.users.values()):
            raise DuplicateError(f"Username {username!r} already exists.")
        row = {
            "id": new_id(),
            "username": username,
            "avatar_url": avatar_url,
            "bio": bio,
            "followers_count": 0,
            "following_count": 0,
            "likes_count": 0,
        }
        self.users[row["id"]] = row
        return dict(row)

    # Videos

    async def get_video(self, video_id: str) -> Row | None:
        row = self.videos.get(video_id)
        return dict(row) if row is not None else None

    async def list_videos_by_user(self, user_id: str) -> list[Row]:
        rows = [r for r in self.videos.values() if r["user_id"] == user_id]
        return [dict(r) for r in pagination.select_candidates(rows, None, len(rows))]

    async def list_trending_videos(self, *, limit: int = 10) -> list[Row]:
        rows = sorted(self.videos.values(), key=lambda r: r["views_count"], reverse=True)
        return [dict(r) for r in rows[:limit]]

    async def fetch_candidates(self, boundary: Boundary | None, count: int) -> list[Row]:
        rows = pagination.select_candidates(self.videos.values(), boundary, count)
        return [dict(r) for r in rows]

    async def create_video(
        self,
        *,
        user_id: str,
        video_url: str,
        thumbnail_url: str | None = None,
        caption: str | None = None,
        sound_name: str | None = None,
    ) -> Row:
        row = {
            "id": new_id(),
            "user_id": user_id,
            "video_url": video_url,
            "thumbnail_url": thumbnail_url,
            "caption": caption,
            "sound_name": sound_name,
            "likes_count": 0,
            "comments_count": 0,
            "views_count": 0,
            "created_at": self.now(),
        }
        self.videos[row["id"]] = row
        return dict(row)

    async def increment_video_views(self, video_id: str) -> None:
        row = self.videos.get(video_id)
        if row is not None:
            row["views_count"] += 1

    # Comments

    async def list_comments_by_video(self, video_id: str) -> list[Row]:
        rows = [r for r in self.comments.values() if r["video_id"] == video_id]
        return [dict(r) for r in pagination.select_candidates(rows, None, len(rows))]

    async def create_comment(self, *, video_id: str, user_id: str, text: str) -> Row:
        row = {
            "id": new_id(),
            "video_id": video_id,
            "user_id": user_id,
            "text": text,
            "created_at": self.now(),
        }
        self.comments[row["id"]] = row

        video = self.videos.get(video_id)
        if video is not None:
            video["comments_count"] += 1
        return dict(row)

    # Likes

    async def get_like_by_user_and_video(self, *, user_id: str, video_id: str) -> Row | None:
        for row in self.likes.values():
            if row["user_id"] == user_id and row["video_id"] == video_id:
                return dict(row)
        return None

    async def create_like(self, *, video_id: str, user_id: str) -> Row:
        if any(r["user_id"] == user_id and r["video_id"] == video_id for r in self.likes.values()):
            raise DuplicateError("Like already exists for this user and video.")
        row = {
            "id": new_id(),
            "video_id": video_id,
            "user_id": user_id,
            "created_at": self.now(),
        }
        self.likes[row["id"]] = row

        video = self.videos.get(video_id)
        if video is not None:
            video["likes_count"] += 1
        return dict(row)

    async def delete_like(self, like_id: str) -> None:
        row = self.likes.pop(like_id, None)
        if row is None:
            return None

        video = self.videos.get(row["video_id"])
        if video is not None and video["likes_count"] > 0:
            video["likes_count"] -= 1
