"""
Like business logic.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from storage import DuplicateError, Storage

from . import schemas


async def like_video(storage: Storage, payload: schemas.CreateLikeRequest) -> schemas.LikeResponse:
    existing = await storage.get_like_by_user_and_video(user_id=payload.user_id, video_id=payload.video_id)
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already liked")

    try:
        row = await storage.create_like(video_id=payload.video_id, user_id=payload.user_id)
    except DuplicateError as exc:
        # A concurrent request won the insert.
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already liked") from exc
    return schemas.LikeResponse.model_validate(row)


async def unlike(storage: Storage, like_id: str) -> None:
    # Deleting an unknown like is a no-op.
    await storage.delete_like(like_id)
