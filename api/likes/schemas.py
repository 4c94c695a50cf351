"""
Like API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from core.schemas import CamelModel


class CreateLikeRequest(CamelModel):
    video_id: str = Field(..., min_length=1, max_length=128)
    user_id: str = Field(..., min_length=1, max_length=128)


class LikeResponse(CamelModel):
    id: str
    video_id: str
    user_id: str
    created_at: datetime
