from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smartleave.core.database import get_db
from smartleave.core.dependencies import get_current_user
from smartleave.core.error_handling import handle_endpoint_errors, parse_uuid
from smartleave.core.exceptions import ForbiddenError
from smartleave.models.profile import Profile, ProfileRole
from smartleave.schemas.profile import ProfileResponse
from smartleave.services.profile_service import get_profile_or_404

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
@handle_endpoint_errors(operation_name="get_my_profile")
async def get_my_profile_endpoint(
    current_user: Profile = Depends(get_current_user),
):
    """Current user's profile, including remaining leave balance."""
    return ProfileResponse.model_validate(current_user)


@router.get("/{user_id}", response_model=ProfileResponse)
@handle_endpoint_errors(operation_name="get_profile")
async def get_profile_endpoint(
    user_id: str,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile_id = parse_uuid(user_id, "User ID")
    if profile_id != current_user.id and current_user.role != ProfileRole.MANAGER:
        raise ForbiddenError("You can only view your own profile")
    profile = await get_profile_or_404(db, profile_id)
    return ProfileResponse.model_validate(profile)
