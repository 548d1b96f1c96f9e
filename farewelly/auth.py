import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import SESSION_TTL_HOURS
from .database import get_db
from .errors import ApiError
from .models import UserProfile, UserSession
from .security_utils import generate_session_token, hash_token

logger = logging.getLogger(__name__)

# auto_error disabled so a missing header becomes our 401 envelope instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


def create_session(db: Session, user: UserProfile) -> str:
    """Create a session row for the user and return the raw bearer token"""
    token = generate_session_token()
    session = UserSession(
        user_id=user.id,
        token_hash=hash_token(token),
        expires_at=datetime.utcnow() + timedelta(hours=SESSION_TTL_HOURS),
    )
    db.add(session)
    db.commit()
    logger.info(f"✅ Session created for user {user.id}")
    return token


def revoke_session(db: Session, token: str) -> None:
    db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).delete(
        synchronize_session=False
    )
    db.commit()


def revoke_all_sessions(db: Session, user_id: str) -> None:
    db.query(UserSession).filter(UserSession.user_id == user_id).delete(synchronize_session=False)
    db.commit()


def resolve_session_user(db: Session, token: str) -> Optional[UserProfile]:
    """Look up the user behind a bearer token; None when unknown or expired"""
    session = db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).first()
    if not session:
        return None

    now = datetime.utcnow()
    if session.expires_at <= now:
        logger.info(f"⚠️ Expired session for user {session.user_id}")
        db.delete(session)
        db.commit()
        return None

    session.last_used_at = now
    db.commit()
    return session.user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> UserProfile:
    if not credentials or not credentials.credentials:
        raise ApiError("Unauthorized", 401)

    user = resolve_session_user(db, credentials.credentials)
    if not user:
        logger.warning("❌ Authentication failed: unknown or expired session token")
        raise ApiError("Unauthorized", 401)

    if user.status == "inactive":
        raise ApiError("Account is inactive", 403)

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[UserProfile]:
    """Like get_current_user but anonymous requests get None"""
    if not credentials or not credentials.credentials:
        return None
    user = resolve_session_user(db, credentials.credentials)
    if user and user.status == "inactive":
        return None
    return user


def require_user_type(*user_types: str, message: Optional[str] = None):
    """
    Dependency factory restricting a route to the given roles.

    Example:
        @router.get("")
        async def list_clients(current_user: UserProfile = Depends(require_user_type("director"))):
            ...
    """
    allowed = set(user_types)
    if message is None:
        message = f"Access denied. {' or '.join(t.capitalize() for t in user_types)} access required"

    async def dependency(current_user: UserProfile = Depends(get_current_user)) -> UserProfile:
        if current_user.user_type not in allowed:
            raise ApiError(message, 403)
        return current_user

    return dependency
