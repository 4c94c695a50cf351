"""
Video API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from core.schemas import CamelModel
from users.schemas import UserResponse


class CreateVideoRequest(CamelModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    video_url: str = Field(..., min_length=1, max_length=2048)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    caption: str | None = Field(default=None, max_length=2200)
    sound_name: str | None = Field(default=None, max_length=200)


class VideoResponse(CamelModel):
    id: str
    user_id: str
    video_url: str
    thumbnail_url: str | None = None
    caption: str | None = None
    sound_name: str | None = None
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    created_at: datetime
    user: UserResponse | None = None


class VideoPageResponse(CamelModel):
    items: list[VideoResponse]
    next_cursor: str | None = None
