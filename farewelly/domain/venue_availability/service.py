"""Venue availability service"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import UserProfile, VenueAvailability
from ...services.notification_service import send_notification
from ...shared.responses import Pagination, paginate
from ...shared.validators import parse_date
from . import slots
from .repository import AvailabilityRepository
from .schemas import BlockDayRequest, SetAvailabilityRequest

logger = logging.getLogger(__name__)

OPENING_HOUR = 9
CLOSING_HOUR = 18


def _parse_day(value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        raise ApiError("Invalid date format", 400) from e


def default_opening_slots(price: Optional[float]) -> list[dict]:
    """Hourly slots for a normal opening day"""
    return [
        {
            "start_time": f"{hour:02d}:00",
            "end_time": f"{hour + 1:02d}:00",
            "is_available": True,
            "price": price or 0,
            "booking_id": None,
        }
        for hour in range(OPENING_HOUR, CLOSING_HOUR)
    ]


BLOCKED_DAY_SLOTS = [
    {"start_time": "00:00", "end_time": "23:59", "is_available": False, "price": 0, "booking_id": None}
]


class AvailabilityService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def get_availability(
        self,
        venue: UserProfile,
        pagination: Pagination,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> tuple[list[VenueAvailability], int, dict]:
        start = _parse_day(start_date) if start_date else None
        end = _parse_day(end_date) if end_date else None
        days, total = paginate(self.repo.list_days(self.db, venue.id, start, end), pagination)
        return days, total, slots.slot_stats(days)

    def set_availability(self, venue: UserProfile, data: SetAvailabilityRequest) -> VenueAvailability:
        day = _parse_day(data.date)
        logger.info(f"📥 Setting {len(data.time_slots)} slots for venue {venue.id} on {day}")

        try:
            new_slots = [
                slots.normalize_slot(slot.model_dump(), default_price=venue.price_per_hour)
                for slot in data.time_slots
            ]
        except ValueError as e:
            raise ApiError(str(e), 400) from e

        existing = self.repo.get_day(self.db, venue.id, day)
        if existing:
            held = {
                (s["start_time"], s["end_time"]): s["booking_id"]
                for s in existing.time_slots or []
                if s.get("booking_id")
            }
            for slot in new_slots:
                booking_id = held.get((slot["start_time"], slot["end_time"]))
                if booking_id:
                    slot["booking_id"] = booking_id
                    slot["is_available"] = False

        availability = self.repo.save_day(self.db, venue.id, day, new_slots)
        self._notify_pending_bookings(venue, availability)
        return availability

    def _notify_pending_bookings(self, venue: UserProfile, availability: VenueAvailability) -> None:
        """Tell families and directors waiting on this day that a fitting slot opened"""
        for booking in self.repo.pending_bookings_on(self.db, venue.id, availability.date):
            requested = slots.to_minutes(booking.time)
            fits = any(
                slot["is_available"]
                and slots.to_minutes(slot["start_time"]) <= requested < slots.to_minutes(slot["end_time"])
                for slot in availability.time_slots
            )
            if not fits:
                continue
            data = {"venue_id": venue.id, "booking_id": booking.id, "date": availability.date.isoformat()}
            send_notification(
                self.db,
                booking.director_id,
                "venue",
                "Venue Available",
                f"{venue.display_name} is now available for your requested time on {availability.date}",
                data,
            )
            send_notification(
                self.db,
                booking.family_id,
                "venue",
                "Venue Available",
                f"{venue.display_name} is now available for {availability.date}",
                data,
            )

    def block_or_unblock(self, venue: UserProfile, data: BlockDayRequest) -> VenueAvailability:
        day = _parse_day(data.date)
        if data.action == "block":
            time_slots, blocked = BLOCKED_DAY_SLOTS, True
        elif data.action == "unblock":
            time_slots, blocked = default_opening_slots(venue.price_per_hour), False
        else:
            raise ApiError("Invalid action. Must be 'block' or 'unblock'", 400)

        availability = self.repo.save_day(self.db, venue.id, day, time_slots, is_blocked=blocked)
        logger.info(f"✅ Venue {venue.id} {data.action}ed {day}")
        return availability
