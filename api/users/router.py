"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storage import Storage, get_storage

from . import schemas, service

router = APIRouter()


@router.get("/users/{user_id}")
async def get_user(
    user_id: str,
    storage: Storage = Depends(get_storage),
) -> schemas.UserResponse:
    return await service.get_user(storage, user_id)


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: schemas.CreateUserRequest,
    storage: Storage = Depends(get_storage),
) -> schemas.UserResponse:
    return await service.create_user(storage, request)
