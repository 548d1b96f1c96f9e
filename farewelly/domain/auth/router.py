"""Auth router - signup, login, logout and current user"""

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ...auth import get_current_user, security
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import success_response
from ..profiles.schemas import UserProfileResponse
from .schemas import LoginRequest, SignupRequest
from .service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/signup", status_code=201)
async def signup(data: SignupRequest, service: AuthService = Depends(get_auth_service)):
    user, token = service.signup(data)
    return success_response(
        {"user": UserProfileResponse.model_validate(user), "token": token},
        "Account created successfully",
    )


@router.post("/login")
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, token = service.login(data)
    return success_response({"user": UserProfileResponse.model_validate(user), "token": token})


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    _: UserProfile = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    service.logout(credentials.credentials)
    return success_response(None, "Logged out")


@router.get("/me")
async def me(current_user: UserProfile = Depends(get_current_user)):
    return success_response(UserProfileResponse.model_validate(current_user))


__all__ = ["router"]
