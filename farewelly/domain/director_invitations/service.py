"""
Director invitation service.

A director issues a code (UFV-YYYY-NNNNNN) for a family they are about to
serve. The family enters it during onboarding; a valid, unexpired code links
the family to the director as an active client.
"""

import logging
import re
import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import DirectorClient, DirectorInvitation, UserProfile
from ...security_utils import sanitize_text
from ...services.chat_rooms import ensure_room_best_effort
from ...services.notification_service import send_notification
from .repository import InvitationRepository
from .schemas import InvitationCreate

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r"^UFV-\d{4}-\d{6}$")
CODE_TTL_DAYS = 30
CODE_ATTEMPTS = 10


def generate_code(now: datetime) -> str:
    return f"UFV-{now.year}-{secrets.randbelow(10**6):06d}"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class InvitationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = InvitationRepository()

    def _unique_code(self, now: datetime) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_code(now)
            if not self.repo.code_exists(self.db, code):
                return code
        raise ApiError("Could not generate a unique invitation code", 500)

    def create_invitation(self, data: InvitationCreate, director: UserProfile) -> DirectorInvitation:
        now = datetime.utcnow()
        invitation = DirectorInvitation(
            director_id=director.id,
            code=self._unique_code(now),
            family_name=sanitize_text(data.family_name, max_length=255),
            primary_contact=sanitize_text(data.primary_contact, max_length=255),
            email=data.email,
            phone=data.phone,
            municipality=sanitize_text(data.municipality, max_length=255),
            expected_date=data.expected_date,
            personal_note=sanitize_text(data.personal_note),
            status="pending",
            expires_at=now + timedelta(days=CODE_TTL_DAYS),
        )
        self.db.add(invitation)
        self.db.commit()
        self.db.refresh(invitation)
        logger.info(f"✉️ Director {director.id} issued invitation {invitation.code}")

        # Families already on the platform see the code in-app
        family = self.repo.get_family_by_email(self.db, invitation.email)
        if family:
            send_notification(
                self.db,
                family.id,
                "system",
                "Director Invitation",
                f"{director.company_name or director.name} invited you to connect. Your code is {invitation.code}",
                {"director_id": director.id, "code": invitation.code},
            )
        return invitation

    def list_invitations(self, director: UserProfile) -> tuple[list[DirectorInvitation], dict]:
        invitations = self.repo.list_for_director(self.db, director.id)
        now = datetime.utcnow()
        summary = {
            "total_pending": sum(1 for i in invitations if i.status == "pending" and not i.is_expired(now)),
            "total_connected": sum(1 for i in invitations if i.status == "connected"),
            "total_expired": sum(1 for i in invitations if i.is_expired(now)),
        }
        return invitations, summary

    def validate_code(self, code: str) -> dict:
        """Public lookup used on the family onboarding form"""
        code = normalize_code(code)
        if not code:
            raise ApiError("Director code is required", 400)
        if not CODE_PATTERN.match(code):
            return {"valid": False, "error": "Invalid code format"}

        invitation = self.repo.get_by_code(self.db, code)
        if not invitation or invitation.status != "pending" or invitation.is_expired():
            return {"valid": False, "error": "Code not found or expired"}

        director = invitation.director
        return {
            "valid": True,
            "director_name": director.name,
            "company_name": director.company_name,
            "code": invitation.code,
            "family_name": invitation.family_name,
        }

    def connect(self, code: str, family: UserProfile) -> DirectorClient:
        code = normalize_code(code)
        invitation = self.repo.get_by_code(self.db, code) if CODE_PATTERN.match(code) else None
        if not invitation or invitation.status != "pending" or invitation.is_expired():
            raise ApiError("Code not found or expired", 404)

        director = invitation.director
        client = self.repo.get_client(self.db, director.id, family.id)
        if client:
            client.status = "active"
        else:
            client = DirectorClient(director_id=director.id, family_id=family.id, status="active", tags=[])
            self.db.add(client)

        invitation.status = "connected"
        invitation.family_id = family.id
        invitation.connected_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(client)
        logger.info(f"✅ Family {family.id} connected to director {director.id} with {code}")

        send_notification(
            self.db,
            director.id,
            "system",
            "Family Connected",
            f"{family.name} connected using invitation code {code}",
            {"family_id": family.id, "client_id": client.id, "code": code},
        )
        ensure_room_best_effort(self.db, "family_director", director, [family, director])
        return client
