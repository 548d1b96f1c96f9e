"""Family profile router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import success_response
from .schemas import FamilyProfileUpdate, UserProfileResponse
from .service import ProfileService

router = APIRouter(prefix="/api/family/profile", tags=["Family Profile"])

family_only = require_user_type("family", message="Access denied. Family access required")


def get_profile_service(db: Session = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


@router.get("")
async def get_family_profile(current_user: UserProfile = Depends(family_only)):
    return success_response(UserProfileResponse.model_validate(current_user))


@router.put("")
async def update_family_profile(
    data: FamilyProfileUpdate,
    current_user: UserProfile = Depends(family_only),
    service: ProfileService = Depends(get_profile_service),
):
    user = service.update_family_profile(current_user, data)
    return success_response(UserProfileResponse.model_validate(user), "Profile updated successfully")


@router.delete("")
async def deactivate_family_profile(
    current_user: UserProfile = Depends(family_only),
    service: ProfileService = Depends(get_profile_service),
):
    service.deactivate(current_user)
    return success_response(None, "Profile deactivated successfully")


__all__ = ["router"]
