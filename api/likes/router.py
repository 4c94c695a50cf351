"""
Like API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from storage import Storage, get_storage

from . import schemas, service

router = APIRouter()


@router.post("/likes", status_code=status.HTTP_201_CREATED)
async def create_like(
    request: schemas.CreateLikeRequest,
    storage: Storage = Depends(get_storage),
) -> schemas.LikeResponse:
    return await service.like_video(storage, request)


@router.delete("/likes/{like_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_like(
    like_id: str,
    storage: Storage = Depends(get_storage),
) -> Response:
    await service.unlike(storage, like_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
