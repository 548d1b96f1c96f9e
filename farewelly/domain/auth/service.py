"""Auth service - signup, login and logout"""

import logging
import secrets

from sqlalchemy.orm import Session

from ...auth import create_session, revoke_session
from ...errors import ApiError
from ...models import UserProfile
from ...security_utils import hash_password, verify_password
from .schemas import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)


def generate_family_code() -> str:
    return f"FAM-{secrets.randbelow(10**6):06d}"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def signup(self, data: SignupRequest) -> tuple[UserProfile, str]:
        logger.info(f"📥 Signup request for {data.email} as {data.user_type}")

        existing = self.db.query(UserProfile).filter(UserProfile.email == data.email).first()
        if existing:
            raise ApiError("User already exists", 409)

        user = UserProfile(
            email=data.email,
            password_hash=hash_password(data.password),
            name=data.name,
            user_type=data.user_type,
            status="active",
            phone=data.phone,
            city=data.city,
            preferences={},
        )
        if data.user_type == "family":
            user.family_code = generate_family_code()
        elif data.user_type == "director":
            user.company_name = data.company_name
        elif data.user_type == "venue":
            user.venue_name = data.venue_name or data.name
            user.capacity = data.capacity
            user.price_per_hour = data.price_per_hour

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ User {user.id} created ({user.user_type})")

        return user, create_session(self.db, user)

    def login(self, data: LoginRequest) -> tuple[UserProfile, str]:
        email = (data.email or "").strip().lower()
        user = self.db.query(UserProfile).filter(UserProfile.email == email).first()
        if not user or not verify_password(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed login attempt for {email}")
            raise ApiError("Invalid email or password", 401)
        if user.status == "inactive":
            raise ApiError("Account is inactive", 403)

        return user, create_session(self.db, user)

    def logout(self, token: str) -> None:
        revoke_session(self.db, token)
