"""Director invitation repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import DirectorClient, DirectorInvitation, UserProfile


class InvitationRepository:
    """Repository for invitation code database operations"""

    @staticmethod
    def code_exists(db: Session, code: str) -> bool:
        return db.query(DirectorInvitation.id).filter(DirectorInvitation.code == code).first() is not None

    @staticmethod
    def get_by_code(db: Session, code: str) -> Optional[DirectorInvitation]:
        return db.query(DirectorInvitation).filter(DirectorInvitation.code == code).first()

    @staticmethod
    def list_for_director(db: Session, director_id: str) -> list[DirectorInvitation]:
        return (
            db.query(DirectorInvitation)
            .filter(DirectorInvitation.director_id == director_id)
            .order_by(DirectorInvitation.created_at.desc(), DirectorInvitation.id)
            .all()
        )

    @staticmethod
    def get_family_by_email(db: Session, email: str) -> Optional[UserProfile]:
        return (
            db.query(UserProfile)
            .filter(UserProfile.email == email, UserProfile.user_type == "family")
            .first()
        )

    @staticmethod
    def get_client(db: Session, director_id: str, family_id: str) -> Optional[DirectorClient]:
        return (
            db.query(DirectorClient)
            .filter(DirectorClient.director_id == director_id, DirectorClient.family_id == family_id)
            .first()
        )
