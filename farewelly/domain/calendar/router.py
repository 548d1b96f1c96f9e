"""Director calendar router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import success_response
from .schemas import CalendarEventCreate, CalendarEventResponse
from .service import CalendarService

router = APIRouter(prefix="/api/director/calendar", tags=["Director Calendar"])

director_only = require_user_type("director", message="Access denied. Director access required")


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    return CalendarService(db)


@router.get("")
async def list_events(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    current_user: UserProfile = Depends(director_only),
    service: CalendarService = Depends(get_calendar_service),
):
    events, stats = service.list_events(current_user, start_date, end_date, type)
    return success_response(
        {"events": [CalendarEventResponse.model_validate(e) for e in events], "stats": stats},
        "Calendar events retrieved successfully",
    )


@router.post("", status_code=201)
async def create_event(
    data: CalendarEventCreate,
    current_user: UserProfile = Depends(director_only),
    service: CalendarService = Depends(get_calendar_service),
):
    event, copies = service.create_event(data, current_user)
    return success_response(
        CalendarEventResponse.model_validate(event),
        "Calendar event created successfully",
        recurring_events_created=copies,
    )


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    series: bool = Query(False),
    current_user: UserProfile = Depends(director_only),
    service: CalendarService = Depends(get_calendar_service),
):
    removed = service.delete_event(event_id, current_user, series)
    return success_response({"deleted": removed}, "Calendar event deleted successfully")


__all__ = ["router"]
