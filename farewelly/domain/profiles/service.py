"""Family profile service"""

import logging

from sqlalchemy.orm import Session

from ...auth import revoke_all_sessions
from ...errors import ApiError
from ...models import UserProfile
from ...shared.validators import is_valid_email
from .schemas import FamilyProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session):
        self.db = db

    def update_family_profile(self, user: UserProfile, data: FamilyProfileUpdate) -> UserProfile:
        if not data.name or not data.name.strip():
            raise ApiError("Name is required", 400)

        if data.email is not None:
            if not is_valid_email(data.email):
                raise ApiError("Invalid email format", 400)
            email = data.email.strip().lower()
            taken = (
                self.db.query(UserProfile)
                .filter(UserProfile.email == email, UserProfile.id != user.id)
                .first()
            )
            if taken:
                raise ApiError("Email is already in use", 409)
            user.email = email

        user.name = data.name.strip()
        for field in ("phone", "address", "emergency_contact", "family_code", "preferences"):
            value = getattr(data, field)
            if value is not None:
                setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ Family profile {user.id} updated")
        return user

    def deactivate(self, user: UserProfile) -> None:
        """Soft delete: the account is kept but can no longer sign in"""
        user.status = "inactive"
        self.db.commit()
        revoke_all_sessions(self.db, user.id)
        logger.info(f"⚠️ Family profile {user.id} deactivated")
