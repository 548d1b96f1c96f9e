"""Venue availability schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class TimeSlot(BaseModel):
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: bool = True
    price: Optional[float] = None


class SetAvailabilityRequest(BaseModel):
    date: str
    time_slots: list[TimeSlot]


class BlockDayRequest(BaseModel):
    date: str
    action: str  # block, unblock
    reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    id: str
    venue_id: str
    date: date
    time_slots: list[dict]
    is_blocked: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
