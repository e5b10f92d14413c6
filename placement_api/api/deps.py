"""
placement_api/api/deps.py

Purpose: Dependency wiring for the routers

- Store handle taken from application state
- Per-request service construction
- Pagination parsing and avatar upload collaborators
"""

from dataclasses import dataclass
from typing import Optional

from bson import ObjectId
from fastapi import Depends, File, Query, Request, UploadFile

from placement_api.core.config import settings
from placement_api.core.exceptions import ValidationError
from placement_api.core.security import CurrentUser, get_current_user
from placement_api.services.avatar_service import AvatarService
from placement_api.services.listing_service import ListingService
from placement_api.services.user_service import UserService
from placement_api.utils.validation_utils import parse_positive_int


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int


@dataclass(frozen=True)
class StoredUpload:
    user_id: str
    file_id: ObjectId


def get_store(request: Request):
    """Returns the store handle created by the application factory."""
    return request.app.state.store


def get_user_service(store=Depends(get_store)) -> UserService:
    return UserService(store.users)


def get_avatar_service(store=Depends(get_store)) -> AvatarService:
    return AvatarService(store.avatars)


def get_listing_service(store=Depends(get_store)) -> ListingService:
    return ListingService(store.users)


def get_pagination(
    page: Optional[str] = Query(default=None, description="One-based page number"),
    limit: Optional[str] = Query(default=None, description="Page size"),
) -> Pagination:
    """
    Parses page/limit query params. Both must be positive integers.
    """
    page_number = parse_positive_int(page) if page is not None else 1
    limit_number = parse_positive_int(limit) if limit is not None else settings.DEFAULT_PAGE_SIZE

    if page_number is None or limit_number is None:
        raise ValidationError(
            "Invalid page or limit parameter",
            details={"page": page, "limit": limit}
        )

    return Pagination(page=page_number, limit=limit_number)


async def store_avatar_upload(
    avatar: Optional[UploadFile] = File(default=None, description="Profile picture"),
    user: CurrentUser = Depends(get_current_user),
    avatars: AvatarService = Depends(get_avatar_service),
) -> StoredUpload:
    """
    Writes the multipart ``avatar`` part into the blob store.
    """
    if not user.id or avatar is None:
        raise ValidationError("User ID and file are required")

    file_id = await avatars.store_upload(avatar, owner_id=user.id)
    return StoredUpload(user_id=user.id, file_id=file_id)
