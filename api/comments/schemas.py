"""
Comment API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from core.schemas import CamelModel
from users.schemas import UserResponse


class CreateCommentRequest(CamelModel):
    video_id: str = Field(..., min_length=1, max_length=128)
    user_id: str = Field(..., min_length=1, max_length=128)
    text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(CamelModel):
    id: str
    video_id: str
    user_id: str
    text: str
    created_at: datetime
    user: UserResponse | None = None
