"""Booking repository - Database operations for bookings"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingStatusHistory, UserProfile

ROLE_COLUMNS = {
    "family": Booking.family_id,
    "director": Booking.director_id,
    "venue": Booking.venue_id,
}


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def list_for_user(
        db: Session,
        user: UserProfile,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        service_type: Optional[str] = None,
    ):
        """Query of the bookings the user is party to in their role"""
        query = (
            db.query(Booking)
            .options(
                joinedload(Booking.family), joinedload(Booking.director), joinedload(Booking.venue)
            )
            .filter(ROLE_COLUMNS[user.user_type] == user.id)
        )
        if status:
            query = query.filter(Booking.status == status)
        if start_date:
            query = query.filter(Booking.date >= start_date)
        if end_date:
            query = query.filter(Booking.date <= end_date)
        if service_type:
            query = query.filter(Booking.service_type == service_type)
        return query.order_by(Booking.date.desc(), Booking.time.desc())

    @staticmethod
    def get(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_active_user(db: Session, user_id: str, user_type: str) -> Optional[UserProfile]:
        return (
            db.query(UserProfile)
            .filter(
                UserProfile.id == user_id,
                UserProfile.user_type == user_type,
                UserProfile.status == "active",
            )
            .first()
        )

    @staticmethod
    def add_history(
        db: Session, booking: Booking, status: str, actor: UserProfile, notes: Optional[str] = None
    ) -> BookingStatusHistory:
        entry = BookingStatusHistory(
            booking_id=booking.id,
            status=status,
            changed_by_type=actor.user_type,
            changed_by_id=actor.id,
            notes=notes,
        )
        db.add(entry)
        return entry
