"""Director calendar service - appointments, blocked time and recurring series"""

import calendar
import logging
from datetime import datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import CALENDAR_EVENT_TYPES, CalendarEvent, UserProfile
from ...security_utils import sanitize_text
from ...services.notification_service import send_notification
from ...shared.validators import parse_date, to_naive_utc
from .repository import CalendarRepository
from .schemas import CalendarEventCreate

logger = logging.getLogger(__name__)

MAX_OCCURRENCES = 366


def add_months(value: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` later, clamped to the month's last day"""
    month_index = value.month - 1 + months
    year, month = value.year + month_index // 12, month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def occurrence_starts(start: datetime, pattern: str, until) -> list[datetime]:
    """Start times of the repeats after ``start`` up to and including the date ``until``"""
    starts = []
    n = 1
    while len(starts) < MAX_OCCURRENCES:
        if pattern == "daily":
            current = start + timedelta(days=n)
        elif pattern == "weekly":
            current = start + timedelta(weeks=n)
        else:
            current = add_months(start, n)
        if current.date() > until:
            break
        starts.append(current)
        n += 1
    return starts


def calendar_stats(events: list[CalendarEvent]) -> dict:
    counts = {event_type: 0 for event_type in CALENDAR_EVENT_TYPES}
    for event in events:
        counts[event.type] = counts.get(event.type, 0) + 1
    total = len(events)
    return {
        "total_events": total,
        "bookings": counts["booking"],
        "appointments": counts["appointment"],
        "blocked_time": counts["blocked"],
        "available_time": counts["available"],
        "availability_percentage": round(counts["available"] / total * 100, 2) if total else 0,
    }


class CalendarService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CalendarRepository()

    def list_events(
        self,
        director: UserProfile,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        event_type: Optional[str] = None,
    ) -> tuple[list[CalendarEvent], dict]:
        try:
            start = datetime.combine(parse_date(start_date), time.min) if start_date else None
            end = datetime.combine(parse_date(end_date), time.max) if end_date else None
        except ValueError as e:
            raise ApiError("Invalid date format", 400) from e

        events = self.repo.list_events(self.db, director.id, start, end, event_type)
        return events, calendar_stats(events)

    def create_event(self, data: CalendarEventCreate, director: UserProfile) -> tuple[CalendarEvent, int]:
        """Returns (event, number of recurring copies created)"""
        start = to_naive_utc(data.start_time)
        end = to_naive_utc(data.end_time)
        if start >= end:
            raise ApiError("End time must be after start time", 400)

        conflict = self.repo.first_conflict(self.db, director.id, start, end)
        if conflict:
            raise ApiError(f"Time slot conflicts with existing event: {conflict.title}", 400)

        booking = None
        if data.booking_id:
            booking = self.repo.get_director_booking(self.db, data.booking_id, director.id)
            if not booking:
                raise ApiError("Booking not found", 404)
            if booking.status == "cancelled":
                raise ApiError("Cannot create event for cancelled booking", 400)

        if data.recurring and data.recurring.end_date < start.date():
            raise ApiError("Recurring end date must not be before the start time", 400)

        event = CalendarEvent(
            owner_id=director.id,
            owner_type="director",
            title=sanitize_text(data.title),
            description=sanitize_text(data.description),
            start_time=start,
            end_time=end,
            type=data.type,
            booking_id=booking.id if booking else None,
            recurring_pattern=data.recurring.pattern if data.recurring else None,
            recurring_end_date=data.recurring.end_date if data.recurring else None,
        )
        self.db.add(event)
        self.db.flush()

        copies = 0
        if data.recurring:
            duration = end - start
            for copy_start in occurrence_starts(start, data.recurring.pattern, data.recurring.end_date):
                clash = self.repo.first_conflict(self.db, director.id, copy_start, copy_start + duration)
                if clash:
                    logger.warning(f"⚠️ Skipping recurrence on {copy_start} for {event.id}: clashes with {clash.id}")
                    continue
                self.db.add(
                    CalendarEvent(
                        owner_id=director.id,
                        owner_type="director",
                        title=event.title,
                        description=event.description,
                        start_time=copy_start,
                        end_time=copy_start + duration,
                        type=event.type,
                        booking_id=event.booking_id,
                        recurring_pattern=event.recurring_pattern,
                        recurring_end_date=event.recurring_end_date,
                        recurring_parent_id=event.id,
                    )
                )
                self.db.flush()
                copies += 1

        self.db.commit()
        self.db.refresh(event)
        logger.info(f"✅ Calendar event {event.id} created for director {director.id} (+{copies} recurring)")

        if booking:
            send_notification(
                self.db,
                booking.family_id,
                "booking",
                "Appointment Scheduled",
                f"Your appointment has been scheduled: {event.title}",
                {"booking_id": booking.id, "event_id": event.id, "start_time": event.start_time.isoformat()},
            )
        return event, copies

    def delete_event(self, event_id: str, director: UserProfile, series: bool = False) -> int:
        """Delete one event, or with ``series`` its recurring copies too; returns the number removed"""
        event = self.repo.get(self.db, event_id, director.id)
        if not event:
            raise ApiError("Event not found", 404)

        removed = 1
        if series:
            removed += self.repo.series_children(self.db, event.id).delete(synchronize_session=False)
        else:
            # Copies outlive their parent as standalone events
            self.repo.series_children(self.db, event.id).update(
                {CalendarEvent.recurring_parent_id: None}, synchronize_session=False
            )
        self.db.delete(event)
        self.db.commit()
        logger.info(f"🗑️ Calendar event {event_id} deleted ({removed} events)")
        return removed
