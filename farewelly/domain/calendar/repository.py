"""Director calendar repository"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Booking, CalendarEvent


class CalendarRepository:
    """Repository for calendar event database operations"""

    @staticmethod
    def list_events(
        db: Session,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        event_type: Optional[str] = None,
    ) -> list[CalendarEvent]:
        query = (
            db.query(CalendarEvent)
            .options(joinedload(CalendarEvent.booking))
            .filter(CalendarEvent.owner_id == owner_id)
        )
        if start:
            query = query.filter(CalendarEvent.start_time >= start)
        if end:
            query = query.filter(CalendarEvent.end_time <= end)
        if event_type:
            query = query.filter(CalendarEvent.type == event_type)
        return query.order_by(CalendarEvent.start_time.asc()).all()

    @staticmethod
    def first_conflict(db: Session, owner_id: str, start: datetime, end: datetime) -> Optional[CalendarEvent]:
        """Earliest event overlapping [start, end) that is not an open availability window"""
        return (
            db.query(CalendarEvent)
            .filter(
                CalendarEvent.owner_id == owner_id,
                CalendarEvent.type != "available",
                CalendarEvent.start_time < end,
                CalendarEvent.end_time > start,
            )
            .order_by(CalendarEvent.start_time.asc())
            .first()
        )

    @staticmethod
    def get(db: Session, event_id: str, owner_id: str) -> Optional[CalendarEvent]:
        return (
            db.query(CalendarEvent)
            .filter(CalendarEvent.id == event_id, CalendarEvent.owner_id == owner_id)
            .first()
        )

    @staticmethod
    def series_children(db: Session, parent_id: str):
        return db.query(CalendarEvent).filter(CalendarEvent.recurring_parent_id == parent_id)

    @staticmethod
    def get_director_booking(db: Session, booking_id: str, director_id: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.director_id == director_id)
            .first()
        )
