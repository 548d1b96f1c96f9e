"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ..profiles.schemas import UserSummary


class BookingCreate(BaseModel):
    """date and time stay strings so a bad value maps to one clear error"""

    service_type: str
    date: str
    time: str
    duration: int
    director_id: Optional[str] = None
    venue_id: Optional[str] = None
    notes: Optional[str] = None
    special_requirements: Optional[dict] = None
    attendees_count: Optional[int] = None

    @field_validator("service_type")
    @classmethod
    def validate_service_type(cls, v):
        if not v.strip():
            raise ValueError("Missing required fields: service_type")
        return v.strip()

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v


class BookingUpdate(BaseModel):
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[int] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v


class StatusHistoryResponse(BaseModel):
    id: str
    status: str
    changed_by_type: str
    changed_by_id: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: str
    family_id: str
    director_id: Optional[str] = None
    venue_id: Optional[str] = None
    service_type: str
    date: date
    time: str
    duration: int
    status: str
    price: Optional[float] = None
    notes: Optional[str] = None
    director_notes: Optional[str] = None
    venue_notes: Optional[str] = None
    special_requirements: Optional[dict] = None
    attendees_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    family: Optional[UserSummary] = None
    director: Optional[UserSummary] = None
    venue: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class BookingDetailResponse(BookingResponse):
    status_history: list[StatusHistoryResponse] = []
