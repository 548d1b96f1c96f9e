"""Venue directory service - lets directors browse venues and check a date"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import UserProfile, VenueAvailability
from ...shared.responses import Pagination, paginate
from ...shared.validators import parse_date
from ..venue_availability.repository import AvailabilityRepository
from .repository import SORT_COLUMNS, VenueDirectoryRepository
from .schemas import VenueListing

logger = logging.getLogger(__name__)

RECENT_DAYS = 30
UPCOMING_DAYS = 14


def venue_open_on(day: Optional[VenueAvailability]) -> bool:
    """
    Same rule as booking creation: a venue without a row for the date is
    open, a blocked day is not, otherwise it needs one free slot.
    """
    if day is None:
        return True
    if day.is_blocked:
        return False
    return any(slot.get("is_available") and not slot.get("booking_id") for slot in day.time_slots or [])


class VenueDirectoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = VenueDirectoryRepository()

    def _stats(self, venue_ids: list[str]) -> dict:
        now = datetime.utcnow()
        since, today = now - timedelta(days=RECENT_DAYS), now.date()
        stats = {
            venue_id: {"recent_bookings": 0, "completed_bookings": 0, "upcoming_bookings": 0}
            for venue_id in venue_ids
        }
        for venue_id, status, booking_date, created_at in self.repo.booking_rows(self.db, venue_ids, since, today):
            entry = stats[venue_id]
            if created_at and created_at >= since:
                entry["recent_bookings"] += 1
                if status == "completed":
                    entry["completed_bookings"] += 1
            if booking_date >= today and status in ("pending", "confirmed"):
                entry["upcoming_bookings"] += 1
        return stats

    def browse(
        self,
        pagination: Pagination,
        search: Optional[str] = None,
        location: Optional[str] = None,
        min_capacity: Optional[int] = None,
        max_capacity: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        available: bool = False,
        on_date: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> tuple[list[dict], int, dict]:
        """Returns (venues, total, filter options)"""
        if sort_by not in SORT_COLUMNS:
            raise ApiError(f"Invalid sort_by. Must be one of: {', '.join(SORT_COLUMNS)}", 400)
        if sort_order not in ("asc", "desc"):
            raise ApiError("Invalid sort_order. Must be 'asc' or 'desc'", 400)
        day: Optional[date] = None
        if on_date:
            try:
                day = parse_date(on_date)
            except ValueError as e:
                raise ApiError("Invalid date format", 400) from e

        query = self.repo.search_venues(
            self.db, search, location, min_capacity, max_capacity, min_price, max_price, sort_by, sort_order
        )

        if available and day:
            # Availability lives in slot JSON, so filter before paginating by hand
            candidates = query.all()
            days = self.repo.days_on(self.db, [v.id for v in candidates], day)
            matching = [v for v in candidates if venue_open_on(days.get(v.id))]
            total = len(matching)
            venues = matching[pagination.offset : pagination.offset + pagination.limit]
        else:
            venues, total = paginate(query, pagination)
            days = self.repo.days_on(self.db, [v.id for v in venues], day) if day else {}

        stats = self._stats([v.id for v in venues])
        rows = []
        for venue in venues:
            row = VenueListing.model_validate(venue).model_dump()
            row["is_available"] = venue_open_on(days.get(venue.id)) if day else None
            row["stats"] = stats[venue.id]
            rows.append(row)

        logger.info(f"🏛️ Venue directory: {total} venues match")
        return rows, total, self.repo.filter_options(self.db)

    def get_venue(self, venue_id: str) -> tuple[UserProfile, dict, list[VenueAvailability]]:
        """Venue with its recent figures and availability for the next two weeks"""
        venue = (
            self.db.query(UserProfile)
            .filter(UserProfile.id == venue_id, UserProfile.user_type == "venue", UserProfile.status == "active")
            .first()
        )
        if not venue:
            raise ApiError("Venue not found or inactive", 404)
        today = datetime.utcnow().date()
        days = AvailabilityRepository.list_days(self.db, venue.id, today, today + timedelta(days=UPCOMING_DAYS)).all()
        return venue, self._stats([venue.id])[venue.id], days
