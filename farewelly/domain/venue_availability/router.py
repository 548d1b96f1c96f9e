"""Venue availability router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import AvailabilityResponse, BlockDayRequest, SetAvailabilityRequest
from .service import AvailabilityService

router = APIRouter(prefix="/api/venue/availability", tags=["Venue Availability"])

venue_only = require_user_type("venue", message="Access denied. Venue access required")


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


@router.get("")
async def get_availability(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(venue_only),
    service: AvailabilityService = Depends(get_availability_service),
):
    days, total, stats = service.get_availability(current_user, pagination, start_date, end_date)
    return success_response(
        {
            "availability": [AvailabilityResponse.model_validate(d) for d in days],
            "stats": stats,
            "period": {"start": start_date, "end": end_date},
        },
        "Availability retrieved successfully",
        pagination.info(total),
    )


@router.post("")
async def set_availability(
    data: SetAvailabilityRequest,
    current_user: UserProfile = Depends(venue_only),
    service: AvailabilityService = Depends(get_availability_service),
):
    availability = service.set_availability(current_user, data)
    return success_response(
        AvailabilityResponse.model_validate(availability), "Availability updated successfully"
    )


@router.put("")
async def block_day(
    data: BlockDayRequest,
    current_user: UserProfile = Depends(venue_only),
    service: AvailabilityService = Depends(get_availability_service),
):
    availability = service.block_or_unblock(current_user, data)
    verb = "blocked" if data.action == "block" else "unblocked"
    return success_response(AvailabilityResponse.model_validate(availability), f"Day {verb} successfully")


__all__ = ["router"]
