"""
Dutch funeral law deadline rules.

A burial or cremation must take place within 6 working days of the death
registration. Working days are Monday to Friday, excluding Dutch public
holidays. Everything here is pure so the monitor, the API and the worker
agree on the same arithmetic.
"""

import math
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Optional

LEGAL_WORKING_DAYS = 6

ALERT_TEMPLATES = {
    "emergency": {
        "alertType": "emergency",
        "message": "EMERGENCY: Legal deadline has passed! Immediate action required.",
        "actionRequired": [
            "Contact municipality immediately",
            "Request emergency extension",
            "Activate emergency funeral protocol",
            "Notify all stakeholders",
        ],
        "stakeholders": ["family", "director", "municipality", "management"],
    },
    "at_risk": {
        "alertType": "critical",
        "message": "CRITICAL: Less than 1 day remaining until legal deadline!",
        "actionRequired": [
            "Finalize all arrangements immediately",
            "Confirm venue and time",
            "Generate all required documents",
            "Send final confirmations",
        ],
        "stakeholders": ["family", "director", "venue"],
    },
    "in_progress": {
        "alertType": "warning",
        "message": "WARNING: 2 days or less remaining. Ensure progress is being made.",
        "actionRequired": [
            "Confirm all major decisions",
            "Book venue if not done",
            "Order required services",
            "Prepare documentation",
        ],
        "stakeholders": ["family", "director"],
    },
    "pending": {
        "alertType": "info",
        "message": "Timeline on track. Continue with funeral planning.",
        "actionRequired": [
            "Gather family preferences",
            "Explore venue options",
            "Review service options",
        ],
        "stakeholders": ["family", "director"],
    },
}


def easter_sunday(year: int) -> date:
    """Gregorian Easter (anonymous Gregorian algorithm)"""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=32)
def dutch_holidays(year: int) -> frozenset:
    easter = easter_sunday(year)
    kings_day = date(year, 4, 27)
    if kings_day.weekday() == 6:
        kings_day = date(year, 4, 26)
    return frozenset(
        {
            date(year, 1, 1),  # Nieuwjaarsdag
            easter - timedelta(days=2),  # Goede Vrijdag
            easter,  # Eerste Paasdag
            easter + timedelta(days=1),  # Tweede Paasdag
            kings_day,  # Koningsdag
            date(year, 5, 5),  # Bevrijdingsdag
            easter + timedelta(days=39),  # Hemelvaartsdag
            easter + timedelta(days=49),  # Eerste Pinksterdag
            easter + timedelta(days=50),  # Tweede Pinksterdag
            date(year, 12, 25),  # Eerste Kerstdag
            date(year, 12, 26),  # Tweede Kerstdag
        }
    )


def is_holiday(day: date) -> bool:
    return day in dutch_holidays(day.year)


def is_working_day(day: date) -> bool:
    return day.weekday() < 5 and not is_holiday(day)


def calculate_legal_deadline(registration: datetime) -> datetime:
    """Registration moment plus 6 working days, keeping the time of day"""
    current = registration
    added = 0
    while added < LEGAL_WORKING_DAYS:
        current += timedelta(days=1)
        if is_working_day(current.date()):
            added += 1
    return current


def calculate_working_days(start: datetime, end: datetime) -> dict:
    """Breakdown of the calendar days between start and end (inclusive)"""
    working_days = 0
    total_days = 0
    holidays = []
    weekends = []
    current = start.date()
    while current <= end.date():
        total_days += 1
        if current.weekday() >= 5:
            weekends.append(current.isoformat())
        elif is_holiday(current):
            holidays.append(current.isoformat())
        else:
            working_days += 1
        current += timedelta(days=1)
    return {
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "totalDays": total_days,
        "workingDays": working_days,
        "holidays": holidays,
        "weekends": weekends,
    }


def days_remaining(deadline: datetime, now: Optional[datetime] = None) -> int:
    now = now or datetime.utcnow()
    return math.ceil((deadline - now).total_seconds() / 86400)


def compliance_status(days: int) -> str:
    if days <= 0:
        return "emergency"
    if days <= 1:
        return "at_risk"
    if days <= 2:
        return "in_progress"
    return "pending"


def generate_alerts(status: str, days: int) -> list[dict]:
    """Alerts for a tracking's current status; compliant trackings get none"""
    template = ALERT_TEMPLATES.get(status)
    if not template:
        return []
    return [{**template, "hoursRemaining": days * 24}]


def dashboard_status(days: int) -> str:
    if days < 0:
        return "overdue"
    if days == 0:
        return "urgent"
    if days == 1:
        return "warning"
    return "ok"


def next_action(status: str, municipality: Optional[str]) -> tuple[str, str]:
    """(next action, action by) in Dutch for the director dashboard"""
    if status == "overdue":
        return f"Gemeente {municipality or 'bellen'} voor uitstel vergunning", "Onmiddellijk"
    if status == "urgent":
        return f"Uitvaart bevestigen bij gemeente {municipality or ''}".strip(), "Vandaag voor 17:00"
    if status == "warning":
        return f"Documenten voorbereiden gemeente {municipality or ''}".strip(), "Morgen 12:00"
    return "Reguliere voorbereiding", "Volgens planning"
