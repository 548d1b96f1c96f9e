"""Booking router - FastAPI endpoints for booking operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import BookingCreate, BookingDetailResponse, BookingResponse, BookingUpdate
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def list_bookings(
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    service_type: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """List the caller's bookings according to their role"""
    bookings, total = service.list_bookings(
        current_user, pagination, status, start_date, end_date, service_type
    )
    return success_response(
        [BookingResponse.model_validate(b) for b in bookings],
        "Bookings retrieved successfully",
        pagination.info(total),
    )


@router.post("", status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.create_booking(data, current_user)
    return success_response(BookingResponse.model_validate(booking), "Booking created successfully")


@router.get("/{booking_id}")
async def get_booking(
    booking_id: str,
    current_user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id, current_user)
    return success_response(BookingDetailResponse.model_validate(booking))


@router.put("/{booking_id}")
async def update_booking(
    booking_id: str,
    data: BookingUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.update_booking(booking_id, data, current_user)
    return success_response(BookingDetailResponse.model_validate(booking), "Booking updated successfully")


@router.delete("/{booking_id}")
async def cancel_booking(
    booking_id: str,
    reason: Optional[str] = Query(None),
    current_user: UserProfile = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel (soft delete) a booking"""
    booking = service.cancel_booking(booking_id, current_user, reason)
    return success_response(BookingResponse.model_validate(booking), "Booking cancelled successfully")


__all__ = ["router"]
