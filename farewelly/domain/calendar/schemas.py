"""Director calendar schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import CALENDAR_EVENT_TYPES, RECURRING_PATTERNS
from ..bookings.schemas import BookingResponse


class RecurrenceRule(BaseModel):
    pattern: str
    end_date: date

    @field_validator("pattern")
    @classmethod
    def check_pattern(cls, v):
        if v not in RECURRING_PATTERNS:
            raise ValueError("Invalid recurring pattern. Must be 'daily', 'weekly' or 'monthly'")
        return v


class CalendarEventCreate(BaseModel):
    title: str
    start_time: datetime
    end_time: datetime
    type: str
    description: Optional[str] = None
    booking_id: Optional[str] = None
    recurring: Optional[RecurrenceRule] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        if not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("type")
    @classmethod
    def check_type(cls, v):
        if v not in CALENDAR_EVENT_TYPES:
            raise ValueError(f"Invalid event type. Must be one of: {', '.join(CALENDAR_EVENT_TYPES)}")
        return v


class CalendarEventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    type: str
    booking_id: Optional[str] = None
    recurring_pattern: Optional[str] = None
    recurring_end_date: Optional[date] = None
    recurring_parent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    booking: Optional[BookingResponse] = None

    class Config:
        from_attributes = True
