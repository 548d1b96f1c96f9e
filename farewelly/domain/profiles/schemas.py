"""Profile schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_dutch_phone


class UserSummary(BaseModel):
    """Compact user reference embedded in other resources"""

    id: str
    name: str
    email: str
    user_type: str
    venue_name: Optional[str] = None
    company_name: Optional[str] = None

    class Config:
        from_attributes = True


class UserProfileResponse(BaseModel):
    id: str
    email: str
    name: str
    user_type: str
    status: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    company_name: Optional[str] = None
    venue_name: Optional[str] = None
    capacity: Optional[int] = None
    price_per_hour: Optional[float] = None
    emergency_contact: Optional[dict] = None
    family_code: Optional[str] = None
    preferences: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FamilyProfileUpdate(BaseModel):
    """Email is validated in the service so the error text stays stable"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[dict] = None
    family_code: Optional[str] = None
    preferences: Optional[dict] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_dutch_phone(v)
        return v
