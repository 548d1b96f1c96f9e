"""Venue directory repository - venue search for directors"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Booking, UserProfile, VenueAvailability

SORT_COLUMNS = {
    "name": UserProfile.name,
    "venue_name": UserProfile.venue_name,
    "price_per_hour": UserProfile.price_per_hour,
    "capacity": UserProfile.capacity,
    "created_at": UserProfile.created_at,
}


class VenueDirectoryRepository:
    """Repository for venue directory queries"""

    @staticmethod
    def search_venues(
        db: Session,
        search: Optional[str] = None,
        location: Optional[str] = None,
        min_capacity: Optional[int] = None,
        max_capacity: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ):
        """Query of active venues matching the filters, sorted"""
        query = db.query(UserProfile).filter(UserProfile.user_type == "venue", UserProfile.status == "active")
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    UserProfile.name.ilike(pattern),
                    UserProfile.venue_name.ilike(pattern),
                    UserProfile.address.ilike(pattern),
                    UserProfile.city.ilike(pattern),
                )
            )
        if location:
            pattern = f"%{location.strip()}%"
            query = query.filter(or_(UserProfile.address.ilike(pattern), UserProfile.city.ilike(pattern)))
        if min_capacity is not None:
            query = query.filter(UserProfile.capacity >= min_capacity)
        if max_capacity is not None:
            query = query.filter(UserProfile.capacity <= max_capacity)
        if min_price is not None:
            query = query.filter(UserProfile.price_per_hour >= min_price)
        if max_price is not None:
            query = query.filter(UserProfile.price_per_hour <= max_price)

        column = SORT_COLUMNS[sort_by]
        return query.order_by(column.desc() if sort_order == "desc" else column.asc(), UserProfile.id)

    @staticmethod
    def days_on(db: Session, venue_ids: list[str], day: date) -> dict:
        """venue_id -> VenueAvailability row for ``day``"""
        if not venue_ids:
            return {}
        rows = (
            db.query(VenueAvailability)
            .filter(VenueAvailability.venue_id.in_(venue_ids), VenueAvailability.date == day)
            .all()
        )
        return {row.venue_id: row for row in rows}

    @staticmethod
    def booking_rows(db: Session, venue_ids: list[str], since: datetime, today: date) -> list:
        """(venue_id, status, date, created_at) for bookings created since ``since`` or still upcoming"""
        if not venue_ids:
            return []
        return (
            db.query(Booking.venue_id, Booking.status, Booking.date, Booking.created_at)
            .filter(
                Booking.venue_id.in_(venue_ids),
                or_(Booking.created_at >= since, Booking.date >= today),
            )
            .all()
        )

    @staticmethod
    def filter_options(db: Session) -> dict:
        venues = db.query(UserProfile).filter(UserProfile.user_type == "venue", UserProfile.status == "active")
        cities = sorted({city for (city,) in venues.with_entities(UserProfile.city).all() if city})
        low, high = venues.with_entities(func.min(UserProfile.price_per_hour), func.max(UserProfile.price_per_hour)).one()
        return {"cities": cities, "price_range": {"min": low, "max": high}}
