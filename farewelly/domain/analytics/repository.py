"""Analytics repository - read-only aggregate queries over bookings and payments"""

from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, DirectorClient, Payment, VenueAvailability

ROLE_COLUMNS = {
    "director": Booking.director_id,
    "venue": Booking.venue_id,
}


class AnalyticsRepository:
    """Repository for analytics queries"""

    @staticmethod
    def bookings_created_between(db: Session, user_type: str, user_id: str, start: datetime, end: datetime) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(
                ROLE_COLUMNS[user_type] == user_id,
                Booking.created_at >= start,
                Booking.created_at <= end,
            )
            .order_by(Booking.created_at.asc())
            .all()
        )

    @staticmethod
    def completed_revenue(db: Session, booking_ids: list[str]) -> dict:
        """booking_id -> sum of completed payment amounts"""
        if not booking_ids:
            return {}
        rows = (
            db.query(Payment.booking_id, func.sum(Payment.amount))
            .filter(Payment.booking_id.in_(booking_ids), Payment.status == "completed")
            .group_by(Payment.booking_id)
            .all()
        )
        return {booking_id: float(total or 0) for booking_id, total in rows}

    @staticmethod
    def availability_days(db: Session, venue_id: str, start: date, end: date) -> list[VenueAvailability]:
        return (
            db.query(VenueAvailability)
            .filter(
                VenueAvailability.venue_id == venue_id,
                VenueAvailability.date >= start,
                VenueAvailability.date <= end,
            )
            .order_by(VenueAvailability.date.asc())
            .all()
        )

    @staticmethod
    def client_counts(db: Session, director_id: str, start: datetime, end: datetime) -> tuple[int, int]:
        """(active clients, clients added in the window)"""
        clients = db.query(DirectorClient).filter(DirectorClient.director_id == director_id)
        active = clients.filter(DirectorClient.status == "active").count()
        new = clients.filter(DirectorClient.created_at >= start, DirectorClient.created_at <= end).count()
        return active, new
