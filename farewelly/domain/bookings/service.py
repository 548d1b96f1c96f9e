"""Booking service - Business logic for booking operations"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import Booking, UserProfile
from ...security_utils import sanitize_text
from ...services.chat_rooms import ensure_room_best_effort
from ...services.notification_service import notify_users, send_notification
from ...shared.responses import Pagination, paginate
from ...shared.validators import normalize_time, parse_date, parse_time
from ..venue_availability import slots
from ..venue_availability.repository import AvailabilityRepository
from .repository import BookingRepository
from .schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

# role -> current status -> statuses that role may move the booking to
STATUS_TRANSITIONS = {
    "family": {
        "pending": {"cancelled"},
        "confirmed": {"cancelled"},
    },
    "director": {
        "pending": {"confirmed", "cancelled"},
        "confirmed": {"completed", "cancelled"},
    },
    "venue": {
        "pending": {"confirmed", "cancelled"},
        "confirmed": {"completed", "cancelled"},
    },
}

NOTES_FIELD = {"family": "notes", "director": "director_notes", "venue": "venue_notes"}

STATUS_MESSAGES = {
    "confirmed": "has been confirmed",
    "cancelled": "has been cancelled",
    "completed": "has been completed",
}


def can_transition(user_type: str, current: str, new: str) -> bool:
    return new in STATUS_TRANSITIONS.get(user_type, {}).get(current, set())


def compute_price(venue: Optional[UserProfile], duration: int) -> Optional[float]:
    """Hourly venue rate prorated over the duration; None without a rate"""
    if not venue or not venue.price_per_hour:
        return None
    return round(venue.price_per_hour * duration / 60, 2)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.availability = AvailabilityRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_bookings(
        self,
        user: UserProfile,
        pagination: Pagination,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> tuple[list[Booking], int]:
        if user.user_type not in STATUS_TRANSITIONS:
            raise ApiError("Invalid user type", 403)
        try:
            start = parse_date(start_date) if start_date else None
            end = parse_date(end_date) if end_date else None
        except ValueError as e:
            raise ApiError("Invalid date format", 400) from e

        query = self.repo.list_for_user(self.db, user, status, start, end, service_type)
        return paginate(query, pagination)

    def get_booking(self, booking_id: str, user: UserProfile) -> Booking:
        booking = self.repo.get(self.db, booking_id)
        if not booking:
            raise ApiError("Booking not found", 404)
        if user.id not in booking.party_ids:
            raise ApiError("Access denied", 403)
        return booking

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def venue_is_available(
        self,
        venue_id: str,
        day: date,
        start_time: str,
        duration: int,
        ignore_booking_id: Optional[str] = None,
    ) -> bool:
        """
        A venue without an availability row for the day is treated as open;
        a row restricts bookings to windows covered by one available slot.
        """
        availability = self.availability.get_day(self.db, venue_id, day)
        if availability is None:
            return True
        if availability.is_blocked:
            return False
        start, end = slots.booking_window(start_time, duration)
        return slots.find_covering_slot(availability.time_slots, start, end, ignore_booking_id) is not None

    def _sync_venue_slot(self, booking: Booking, new_status: str) -> None:
        if not booking.venue_id:
            return
        availability = self.availability.get_day(self.db, booking.venue_id, booking.date)
        if availability is None:
            return

        if new_status == "cancelled":
            updated, changed = slots.release_booking(availability.time_slots, booking.id)
        elif new_status == "confirmed":
            start, end = slots.booking_window(booking.time, booking.duration)
            updated, changed = slots.claim_for_booking(availability.time_slots, booking.id, start, end)
        else:
            return

        if changed:
            availability.time_slots = updated
            logger.info(f"📅 Venue slot for booking {booking.id} updated ({new_status})")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, user: UserProfile) -> Booking:
        logger.info(f"📥 Creating booking for family {user.id}")

        try:
            booking_date = parse_date(data.date)
            booking_time = parse_time(data.time)
        except ValueError as e:
            raise ApiError("Invalid date or time format", 400) from e

        if user.user_type != "family":
            raise ApiError("Only families can create bookings", 403)

        if datetime.combine(booking_date, booking_time) <= datetime.now():
            raise ApiError("Booking date must be in the future", 400)

        director = venue = None
        if data.director_id:
            director = self.repo.get_active_user(self.db, data.director_id, "director")
            if not director:
                raise ApiError("Director not found or inactive", 404)
        if data.venue_id:
            venue = self.repo.get_active_user(self.db, data.venue_id, "venue")
            if not venue:
                raise ApiError("Venue not found or inactive", 404)

        start_time = booking_time.strftime("%H:%M")
        if venue and not self.venue_is_available(venue.id, booking_date, start_time, data.duration):
            raise ApiError("Venue is not available at the requested time", 400)

        booking = Booking(
            family_id=user.id,
            director_id=director.id if director else None,
            venue_id=venue.id if venue else None,
            service_type=data.service_type,
            date=booking_date,
            time=start_time,
            duration=data.duration,
            status="pending",
            price=compute_price(venue, data.duration),
            notes=sanitize_text(data.notes),
            special_requirements=data.special_requirements,
            attendees_count=data.attendees_count,
        )
        self.db.add(booking)
        self.db.flush()
        self.repo.add_history(self.db, booking, "pending", user, "Booking created")
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking.id} created (price={booking.price})")

        message = f"New {booking.service_type} booking request from {user.name} on {booking.date} at {booking.time}"
        notify_users(
            self.db,
            [booking.director_id, booking.venue_id],
            "booking",
            "New Booking Request",
            message,
            {"booking_id": booking.id},
        )

        if director:
            ensure_room_best_effort(self.db, "family_director", user, [user, director], booking.id)
        elif venue:
            ensure_room_best_effort(self.db, "family_venue", user, [user, venue], booking.id)

        return booking

    def update_booking(self, booking_id: str, data: BookingUpdate, user: UserProfile) -> Booking:
        booking = self.get_booking(booking_id, user)

        if booking.status == "completed":
            raise ApiError("Cannot modify completed booking", 400)

        new_status = data.status if data.status and data.status != booking.status else None
        if new_status and not can_transition(user.user_type, booking.status, new_status):
            raise ApiError(f"Cannot change status from {booking.status} to {new_status}", 400)

        reschedule = any(v is not None for v in (data.date, data.time, data.duration))
        if reschedule:
            if user.user_type != "family":
                raise ApiError("Only families can change booking date, time or duration", 403)
            try:
                new_date = parse_date(data.date) if data.date is not None else booking.date
                new_time = normalize_time(data.time) if data.time is not None else booking.time
            except ValueError as e:
                raise ApiError("Invalid date or time format", 400) from e
            new_duration = data.duration or booking.duration

            if datetime.combine(new_date, parse_time(new_time)) <= datetime.now():
                raise ApiError("Booking date must be in the future", 400)

            if booking.venue_id and not self.venue_is_available(
                booking.venue_id, new_date, new_time, new_duration, ignore_booking_id=booking.id
            ):
                raise ApiError("Venue is not available at the new requested time", 400)

            # The held slot follows the booking to its new window
            self._sync_venue_slot(booking, "cancelled")
            booking.date = new_date
            booking.time = new_time
            booking.duration = new_duration
            if booking.venue_id:
                booking.price = compute_price(booking.venue, new_duration)
            if booking.status == "confirmed" and not new_status:
                self._sync_venue_slot(booking, "confirmed")

        if data.notes is not None:
            setattr(booking, NOTES_FIELD[user.user_type], sanitize_text(data.notes))

        if new_status:
            previous = booking.status
            booking.status = new_status
            self.repo.add_history(self.db, booking, new_status, user, data.notes)
            self._sync_venue_slot(booking, new_status)
            logger.info(f"✅ Booking {booking.id}: {previous} -> {new_status} by {user.user_type}")

        self.db.commit()
        self.db.refresh(booking)

        if new_status in STATUS_MESSAGES:
            notify_users(
                self.db,
                [booking.family_id, booking.director_id, booking.venue_id],
                "booking",
                "Booking Update",
                f"Your booking {STATUS_MESSAGES[new_status]}",
                {"booking_id": booking.id, "status": new_status},
                exclude=user.id,
            )
        elif reschedule:
            notify_users(
                self.db,
                [booking.director_id, booking.venue_id],
                "booking",
                "Booking Rescheduled",
                f"Booking moved to {booking.date} at {booking.time}",
                {"booking_id": booking.id},
                exclude=user.id,
            )

        return booking

    def cancel_booking(self, booking_id: str, user: UserProfile, reason: Optional[str] = None) -> Booking:
        """Soft delete: the booking stays on record as cancelled"""
        booking = self.repo.get(self.db, booking_id)
        if not booking:
            raise ApiError("Booking not found", 404)
        if user.user_type != "family" or booking.family_id != user.id:
            raise ApiError("Only the family who created the booking can cancel it", 403)
        if booking.status == "completed":
            raise ApiError("Cannot cancel completed booking", 400)
        if booking.status == "cancelled":
            raise ApiError("Booking is already cancelled", 400)

        booking.status = "cancelled"
        self.repo.add_history(self.db, booking, "cancelled", user, reason or "Cancelled by family")
        self._sync_venue_slot(booking, "cancelled")
        self.db.commit()
        self.db.refresh(booking)
        logger.info(f"⚠️ Booking {booking.id} cancelled by family {user.id}")

        for party_id in (booking.director_id, booking.venue_id):
            send_notification(
                self.db,
                party_id,
                "booking",
                "Booking Cancelled",
                f"{user.name} cancelled the booking on {booking.date} at {booking.time}",
                {"booking_id": booking.id},
            )
        return booking
