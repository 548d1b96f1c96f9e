"""Director client repository - Database operations for director/family relationships"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Booking, DirectorClient, UserProfile


class DirectorClientRepository:
    """Repository for director client database operations"""

    @staticmethod
    def list_clients(db: Session, director_id: str, status: Optional[str] = None, search: Optional[str] = None):
        query = (
            db.query(DirectorClient)
            .options(joinedload(DirectorClient.family))
            .join(UserProfile, UserProfile.id == DirectorClient.family_id)
            .filter(DirectorClient.director_id == director_id)
        )
        if status:
            query = query.filter(DirectorClient.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    UserProfile.name.ilike(pattern),
                    UserProfile.email.ilike(pattern),
                    UserProfile.phone.ilike(pattern),
                )
            )
        return query.order_by(DirectorClient.created_at.desc())

    @staticmethod
    def get(db: Session, client_id: str, director_id: str) -> Optional[DirectorClient]:
        return (
            db.query(DirectorClient)
            .filter(DirectorClient.id == client_id, DirectorClient.director_id == director_id)
            .first()
        )

    @staticmethod
    def get_by_family(db: Session, director_id: str, family_id: str) -> Optional[DirectorClient]:
        return (
            db.query(DirectorClient)
            .filter(DirectorClient.director_id == director_id, DirectorClient.family_id == family_id)
            .first()
        )

    @staticmethod
    def get_family(db: Session, family_id: str) -> Optional[UserProfile]:
        return (
            db.query(UserProfile)
            .filter(UserProfile.id == family_id, UserProfile.user_type == "family")
            .first()
        )

    @staticmethod
    def bookings_between(db: Session, director_id: str, family_id: str):
        return (
            db.query(Booking)
            .filter(Booking.director_id == director_id, Booking.family_id == family_id)
            .order_by(Booking.date.desc(), Booking.time.desc())
        )
