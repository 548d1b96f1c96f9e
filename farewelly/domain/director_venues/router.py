"""Venue directory router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from ..venue_availability.schemas import AvailabilityResponse
from .schemas import VenueListing
from .service import VenueDirectoryService

router = APIRouter(prefix="/api/director/venues", tags=["Director Venues"])

director_only = require_user_type("director", message="Access denied. Director access required")


def get_venue_directory_service(db: Session = Depends(get_db)) -> VenueDirectoryService:
    return VenueDirectoryService(db)


@router.get("")
async def browse_venues(
    search: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_capacity: Optional[int] = Query(None),
    max_capacity: Optional[int] = Query(None),
    min_price: Optional[float] = Query(None),
    max_price: Optional[float] = Query(None),
    available: bool = Query(False),
    date: Optional[str] = Query(None),
    sort_by: str = Query("name"),
    sort_order: str = Query("asc"),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(director_only),
    service: VenueDirectoryService = Depends(get_venue_directory_service),
):
    """Active venues with booking figures and, for a given date, whether they are open"""
    venues, total, options = service.browse(
        pagination,
        search=search,
        location=location,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        min_price=min_price,
        max_price=max_price,
        available=available,
        on_date=date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    applied = {
        "search": search,
        "location": location,
        "min_capacity": min_capacity,
        "max_capacity": max_capacity,
        "min_price": min_price,
        "max_price": max_price,
        "available": available,
        "date": date,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    return success_response(
        {"venues": venues, "filters": {**options, "applied_filters": applied}},
        "Venues retrieved successfully",
        pagination.info(total),
    )


@router.get("/{venue_id}")
async def get_venue(
    venue_id: str,
    current_user: UserProfile = Depends(director_only),
    service: VenueDirectoryService = Depends(get_venue_directory_service),
):
    venue, stats, days = service.get_venue(venue_id)
    return success_response(
        {
            "venue": VenueListing.model_validate(venue),
            "stats": stats,
            "availability": [AvailabilityResponse.model_validate(d) for d in days],
        }
    )


__all__ = ["router"]
