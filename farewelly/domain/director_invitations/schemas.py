"""Director invitation schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_dutch_phone, validate_email


class InvitationCreate(BaseModel):
    family_name: str
    primary_contact: str
    email: str
    phone: str
    municipality: Optional[str] = None
    expected_date: Optional[date] = None
    personal_note: Optional[str] = None

    @field_validator("family_name", "primary_contact")
    @classmethod
    def not_blank(cls, v, info):
        if not v.strip():
            raise ValueError(f"Missing required field: {info.field_name}")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_dutch_phone(v)


class ConnectRequest(BaseModel):
    code: str


class InvitationResponse(BaseModel):
    id: str
    code: str
    family_name: str
    primary_contact: str
    email: str
    phone: str
    municipality: Optional[str] = None
    expected_date: Optional[date] = None
    personal_note: Optional[str] = None
    status: str
    family_id: Optional[str] = None
    connected_at: Optional[datetime] = None
    expires_at: datetime
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
