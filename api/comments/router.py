"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storage import Storage, get_storage

from . import schemas, service

router = APIRouter()


@router.get("/comments/{video_id}")
async def list_comments(
    video_id: str,
    storage: Storage = Depends(get_storage),
) -> list[schemas.CommentResponse]:
    return await service.list_comments(storage, video_id)


@router.post("/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: schemas.CreateCommentRequest,
    storage: Storage = Depends(get_storage),
) -> schemas.CommentResponse:
    return await service.create_comment(storage, request)
