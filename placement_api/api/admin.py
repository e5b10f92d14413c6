"""
placement_api/api/admin.py

Purpose: Administrator endpoints

- Paginated listing of all students
- Listing of counsellors
- Profile picture download by file id
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from placement_api.api.deps import (
    Pagination,
    get_avatar_service,
    get_listing_service,
    get_pagination,
)
from placement_api.core.exceptions import ValidationError
from placement_api.core.security import require_roles
from placement_api.models.user import Role
from placement_api.schemas.user import CounsellorListResponse
from placement_api.services.avatar_service import AvatarService
from placement_api.services.listing_service import ListingService
from placement_api.utils.validation_utils import is_valid_object_id, to_object_id

router = APIRouter(prefix="/admin", dependencies=[Depends(require_roles(Role.ADMIN))])


@router.get("/students")
async def list_students(
    pagination: Pagination = Depends(get_pagination),
    listings: ListingService = Depends(get_listing_service),
):
    """Paginated students with counsellor names resolved."""
    return await listings.list_students(pagination.page, pagination.limit)


@router.get("/counsellors", response_model=CounsellorListResponse)
async def list_counsellors(listings: ListingService = Depends(get_listing_service)):
    return await listings.list_counsellors()


@router.get("/avatar/{file_id}")
async def get_avatar_by_id(
    file_id: str,
    avatars: AvatarService = Depends(get_avatar_service),
):
    """
    Streams any stored profile picture by its file id.
    """
    if not is_valid_object_id(file_id):
        raise ValidationError("Invalid file ID")

    object_id = to_object_id(file_id)
    grid_out = await avatars.open(object_id)

    return StreamingResponse(
        avatars.stream(grid_out, object_id),
        media_type="application/octet-stream",
    )
