"""
Video business logic.

Scope:
- the cursor-paginated feed (see `core/pagination.py`)
- trending / per-user listings
- single video fetch (counts a view) and creation
"""

from __future__ import annotations

from fastapi import HTTPException, status

from core import pagination
from storage import Row, Storage
from users.service import to_user_response

from . import schemas

TRENDING_LIMIT = 10


async def with_users(storage: Storage, rows: list[Row]) -> list[schemas.VideoResponse]:
    """
    Attach the author to each video. A missing author gives `user=None`;
    the video itself is never dropped.
    """
    users = await storage.get_users([str(row["user_id"]) for row in rows])
    return [
        schemas.VideoResponse(
            **row,
            user=to_user_response(users.get(str(row["user_id"]))),
        )
        for row in rows
    ]


async def feed_page(
    storage: Storage,
    *,
    limit: int,
    cursor: str | None = None,
    strict_cursor: bool = False,
) -> schemas.VideoPageResponse:
    try:
        page = await pagination.fetch_page(storage, limit, cursor, strict=strict_cursor)
    except pagination.InvalidCursorError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    items = await with_users(storage, page.items)
    return schemas.VideoPageResponse(items=items, next_cursor=page.next_cursor)


async def trending(storage: Storage, *, limit: int = TRENDING_LIMIT) -> list[schemas.VideoResponse]:
    rows = await storage.list_trending_videos(limit=limit)
    return await with_users(storage, rows)


async def videos_by_user(storage: Storage, user_id: str) -> list[schemas.VideoResponse]:
    rows = await storage.list_videos_by_user(user_id)
    return await with_users(storage, rows)


async def view_video(storage: Storage, video_id: str) -> schemas.VideoResponse:
    row = await storage.get_video(video_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")

    await storage.increment_video_views(video_id)
    updated = await storage.get_video(video_id) or row

    [video] = await with_users(storage, [updated])
    return video


async def create_video(storage: Storage, payload: schemas.CreateVideoRequest) -> schemas.VideoResponse:
    row = await storage.create_video(
        user_id=payload.user_id,
        video_url=payload.video_url,
        thumbnail_url=payload.thumbnail_url,
        caption=payload.caption,
        sound_name=payload.sound_name,
    )
    [video] = await with_users(storage, [row])
    return video
