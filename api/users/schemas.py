"""
User API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import Field

from core.schemas import CamelModel


class CreateUserRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=64)
    avatar_url: str | None = Field(default=None, max_length=2048)
    bio: str | None = Field(default=None, max_length=500)


class UserResponse(CamelModel):
    id: str
    username: str
    avatar_url: str | None = None
    bio: str | None = None
    followers_count: int = 0
    following_count: int = 0
    likes_count: int = 0
