"""Director invitation router - issuing, validating and redeeming director codes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import success_response
from ..director_clients.schemas import ClientResponse
from .schemas import ConnectRequest, InvitationCreate, InvitationResponse
from .service import InvitationService

router = APIRouter(tags=["Director Invitations"])

director_only = require_user_type("director", message="Access denied. Director access required")
family_only = require_user_type("family", message="Access denied. Family access required")


def get_invitation_service(db: Session = Depends(get_db)) -> InvitationService:
    """Dependency injection for InvitationService"""
    return InvitationService(db)


def invitation_row(invitation) -> dict:
    data = InvitationResponse.model_validate(invitation).model_dump()
    data["is_expired"] = invitation.is_expired()
    return data


@router.post("/api/director/invitations", status_code=201)
async def create_invitation(
    data: InvitationCreate,
    current_user: UserProfile = Depends(director_only),
    service: InvitationService = Depends(get_invitation_service),
):
    invitation = service.create_invitation(data, current_user)
    return success_response(invitation_row(invitation), "Invitation created successfully")


@router.get("/api/director/invitations")
async def list_invitations(
    current_user: UserProfile = Depends(director_only),
    service: InvitationService = Depends(get_invitation_service),
):
    invitations, summary = service.list_invitations(current_user)
    return success_response([invitation_row(i) for i in invitations], **summary)


@router.post("/api/director/invitations/connect")
async def connect_with_code(
    data: ConnectRequest,
    current_user: UserProfile = Depends(family_only),
    service: InvitationService = Depends(get_invitation_service),
):
    client = service.connect(data.code, current_user)
    return success_response(ClientResponse.model_validate(client), "Connected to director successfully")


@router.get("/api/validate-director-code")
async def validate_director_code(
    code: Optional[str] = Query(None),
    service: InvitationService = Depends(get_invitation_service),
):
    """Public: families check a code before signing up"""
    return service.validate_code(code)


__all__ = ["router"]
