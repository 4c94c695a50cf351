"""
Comment business logic.
"""

from __future__ import annotations

from storage import Row, Storage
from users.service import to_user_response

from . import schemas


async def _with_users(storage: Storage, rows: list[Row]) -> list[schemas.CommentResponse]:
    users = await storage.get_users([str(row["user_id"]) for row in rows])
    return [
        schemas.CommentResponse(**row, user=to_user_response(users.get(str(row["user_id"]))))
        for row in rows
    ]


async def list_comments(storage: Storage, video_id: str) -> list[schemas.CommentResponse]:
    rows = await storage.list_comments_by_video(video_id)
    return await _with_users(storage, rows)


async def create_comment(storage: Storage, payload: schemas.CreateCommentRequest) -> schemas.CommentResponse:
    row = await storage.create_comment(
        video_id=payload.video_id,
        user_id=payload.user_id,
        text=payload.text,
    )
    [comment] = await _with_users(storage, [row])
    return comment
