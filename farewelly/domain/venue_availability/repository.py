"""Venue availability repository - Database operations for availability days"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, VenueAvailability


class AvailabilityRepository:
    """Repository for venue availability database operations"""

    @staticmethod
    def get_day(db: Session, venue_id: str, day: date) -> Optional[VenueAvailability]:
        return (
            db.query(VenueAvailability)
            .filter(VenueAvailability.venue_id == venue_id, VenueAvailability.date == day)
            .first()
        )

    @staticmethod
    def list_days(
        db: Session, venue_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ):
        """Query (not yet executed) of a venue's days ordered by date"""
        query = db.query(VenueAvailability).filter(VenueAvailability.venue_id == venue_id)
        if start_date:
            query = query.filter(VenueAvailability.date >= start_date)
        if end_date:
            query = query.filter(VenueAvailability.date <= end_date)
        return query.order_by(VenueAvailability.date.asc())

    @staticmethod
    def save_day(
        db: Session, venue_id: str, day: date, time_slots: list[dict], is_blocked: bool = False
    ) -> VenueAvailability:
        """Upsert the slots for one venue day"""
        availability = AvailabilityRepository.get_day(db, venue_id, day)
        if availability is None:
            availability = VenueAvailability(venue_id=venue_id, date=day)
            db.add(availability)
        # JSON columns are not mutation-tracked, always assign a new list
        availability.time_slots = list(time_slots)
        availability.is_blocked = is_blocked
        db.commit()
        db.refresh(availability)
        return availability

    @staticmethod
    def pending_bookings_on(db: Session, venue_id: str, day: date) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.venue_id == venue_id, Booking.date == day, Booking.status == "pending")
            .all()
        )
