"""
placement_api/api/counsellor.py

Purpose: Counsellor endpoints

- Paginated listing of the caller's assigned students
"""

from fastapi import APIRouter, Depends

from placement_api.api.deps import Pagination, get_listing_service, get_pagination
from placement_api.core.security import CurrentUser, get_current_user, require_roles
from placement_api.models.user import Role
from placement_api.services.listing_service import ListingService

router = APIRouter(prefix="/counsellor", dependencies=[Depends(require_roles(Role.COUNSELLOR))])


@router.get("/students")
async def list_my_students(
    pagination: Pagination = Depends(get_pagination),
    user: CurrentUser = Depends(get_current_user),
    listings: ListingService = Depends(get_listing_service),
):
    """Students whose profile names the calling counsellor."""
    return await listings.list_counsellor_students(user.id, pagination.page, pagination.limit)
