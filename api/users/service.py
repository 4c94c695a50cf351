"""
User business logic.
"""

from __future__ import annotations

from fastapi import HTTPException, status

from storage import DuplicateError, Row, Storage

from . import schemas


def to_user_response(row: Row | None) -> schemas.UserResponse | None:
    if row is None:
        return None
    return schemas.UserResponse.model_validate(row)


async def get_user(storage: Storage, user_id: str) -> schemas.UserResponse:
    row = await storage.get_user(user_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return schemas.UserResponse.model_validate(row)


async def create_user(storage: Storage, payload: schemas.CreateUserRequest) -> schemas.UserResponse:
    username = payload.username.strip()
    if not username:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username is required.")

    existing = await storage.get_user_by_username(username)
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")

    try:
        row = await storage.create_user(
            username=username,
            avatar_url=payload.avatar_url,
            bio=payload.bio,
        )
    except DuplicateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken") from exc
    return schemas.UserResponse.model_validate(row)
