"""Shared validation utilities"""

import re
import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email.strip()))


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_dutch_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a Dutch phone number to E.164 (+31XXXXXXXXX).

    Accepts 06-12345678, 0201234567, +31 6 12345678 and 0031612345678.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("0031"):
        digits = digits[4:]
    elif digits.startswith("31") and phone.strip().startswith("+"):
        digits = digits[2:]
    elif digits.startswith("0"):
        digits = digits[1:]

    if len(digits) != 9:
        raise ValueError("Phone number must be a valid Dutch number")

    return f"+31{digits}"


def parse_date(value) -> date:
    """Parse YYYY-MM-DD (or pass a date through)"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def parse_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS"""
    value = str(value).strip()
    if not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time: {value}")
    parts = [int(p) for p in value.split(":")]
    return time(parts[0], parts[1])


def normalize_time(value: str) -> str:
    """Return the HH:MM form of a time string"""
    return parse_time(value).strftime("%H:%M")


def to_naive_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
