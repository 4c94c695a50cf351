"""
Video API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from core.settings import Settings, get_settings
from storage import Storage, get_storage

from . import schemas, service

router = APIRouter()


@router.get("/videos")
async def list_videos(
    limit: int | None = Query(default=None),
    cursor: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> schemas.VideoPageResponse:
    """
    Feed page, newest first. `limit` is clamped to [1, 50]; pass the
    returned `nextCursor` back as `cursor` for the following page.
    """
    return await service.feed_page(
        storage,
        limit=settings.feed_default_limit if limit is None else limit,
        cursor=cursor,
        strict_cursor=settings.feed_strict_cursor,
    )


@router.get("/videos/trending")
async def trending_videos(
    storage: Storage = Depends(get_storage),
) -> list[schemas.VideoResponse]:
    return await service.trending(storage)


@router.get("/videos/user/{user_id}")
async def user_videos(
    user_id: str,
    storage: Storage = Depends(get_storage),
) -> list[schemas.VideoResponse]:
    return await service.videos_by_user(storage, user_id)


@router.get("/videos/{video_id}")
async def get_video(
    video_id: str,
    storage: Storage = Depends(get_storage),
) -> schemas.VideoResponse:
    return await service.view_video(storage, video_id)


@router.post("/videos", status_code=status.HTTP_201_CREATED)
async def create_video(
    request: schemas.CreateVideoRequest,
    storage: Storage = Depends(get_storage),
) -> schemas.VideoResponse:
    return await service.create_video(storage, request)
