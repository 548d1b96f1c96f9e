"""Auth schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import USER_TYPES
from ...shared.validators import validate_email

MIN_PASSWORD_LENGTH = 6


class SignupRequest(BaseModel):
    email: str
    password: str
    name: str
    user_type: str
    phone: Optional[str] = None
    city: Optional[str] = None
    company_name: Optional[str] = None
    venue_name: Optional[str] = None
    capacity: Optional[int] = None
    price_per_hour: Optional[float] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("user_type")
    @classmethod
    def check_user_type(cls, v):
        if v not in USER_TYPES:
            raise ValueError("Invalid user type")
        return v

    @field_validator("price_per_hour")
    @classmethod
    def check_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price per hour cannot be negative")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str
