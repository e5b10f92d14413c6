"""
placement_api/api/users.py

Purpose: Self-service user endpoints

- Profile retrieval and allow-listed update
- Avatar upload, download and removal

Routes are thin: they resolve the caller, call one service and shape the
response. Errors are raised as PlacementError subclasses and rendered by
the shared exception handlers.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import StreamingResponse

from placement_api.api.deps import (
    StoredUpload,
    get_avatar_service,
    get_user_service,
    store_avatar_upload,
)
from placement_api.core.exceptions import ResourceNotFoundError, ValidationError
from placement_api.core.logging import get_logger
from placement_api.core.security import CurrentUser, get_current_user
from placement_api.schemas.user import (
    AvatarUploadResponse,
    MessageResponse,
    UserDetailsResponse,
    UserUpdateResponse,
)
from placement_api.services.avatar_service import AvatarService
from placement_api.services.user_service import UserService
from placement_api.utils.validation_utils import is_valid_object_id, to_object_id

logger = get_logger(__name__)
router = APIRouter(prefix="/user", dependencies=[Depends(get_current_user)])


@router.post("/avatar", response_model=AvatarUploadResponse)
async def upload_avatar(
    upload: StoredUpload = Depends(store_avatar_upload),
    users: UserService = Depends(get_user_service),
    avatars: AvatarService = Depends(get_avatar_service),
):
    """
    Stores a new profile picture and points the caller's profile at it.

    The previously referenced file, if any, stays in the blob store.
    """
    if not await users.set_avatar(upload.user_id, upload.file_id):
        await avatars.delete(upload.file_id)
        raise ResourceNotFoundError("User not found")

    logger.info("Avatar uploaded", extra={"user_id": upload.user_id, "file_id": str(upload.file_id)})

    return AvatarUploadResponse(
        message="Avatar uploaded successfully",
        fileId=str(upload.file_id),
    )


@router.get("/avatar")
async def get_avatar(
    user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    avatars: AvatarService = Depends(get_avatar_service),
):
    """
    Streams the caller's profile picture as image/jpeg.
    """
    file_id = await users.get_avatar_reference(user.id)
    if not file_id:
        raise ResourceNotFoundError("Profile picture not found")

    if not is_valid_object_id(file_id):
        raise ValidationError("Invalid file ID")

    file_id = to_object_id(file_id)
    grid_out = await avatars.open(file_id)

    return StreamingResponse(avatars.stream(grid_out, file_id), media_type="image/jpeg")


@router.delete("/avatar", response_model=MessageResponse)
async def remove_avatar(
    user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    avatars: AvatarService = Depends(get_avatar_service),
):
    """
    Deletes the caller's profile picture, then clears the reference.

    The reference is only cleared once the blob delete has succeeded (or
    the blob was already gone), and only while it still points at the
    deleted file.
    """
    try:
        file_id = await users.get_avatar_reference(user.id)
    except ResourceNotFoundError as e:
        raise ResourceNotFoundError("User does not exist.") from e

    if not file_id:
        raise ResourceNotFoundError("Avatar does not exist.")

    if not is_valid_object_id(file_id):
        raise ValidationError("Invalid file ID")

    file_id = to_object_id(file_id)
    await avatars.delete(file_id)

    if not await users.clear_avatar(user.id, file_id):
        logger.warning(
            "Avatar reference changed during removal; left untouched",
            extra={"user_id": user.id, "file_id": str(file_id)}
        )

    return MessageResponse(message="Avatar removed successfully.")


@router.patch("", response_model=UserUpdateResponse)
async def update_user(
    updates: Dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """
    Updates allow-listed fields of the caller's record.
    """
    updated = await users.update_user(user.id, updates)
    return UserUpdateResponse(message="User updated successfully.", user=updated)


@router.get("/{user_id}", response_model=UserDetailsResponse)
async def get_user_details(
    user_id: str,
    users: UserService = Depends(get_user_service),
):
    """
    Returns a user's public profile.
    """
    return UserDetailsResponse(user=await users.get_user_details(user_id))
