"""
Time-slot helpers for venue availability days.

A day's ``time_slots`` is a JSON list of dicts:
``{"start_time": "09:00", "end_time": "10:00", "is_available": True,
"price": 150.0, "booking_id": None}``.
Times are compared as minutes since midnight.
"""

from typing import Optional

from ...shared.validators import normalize_time, parse_time

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: str) -> int:
    t = parse_time(value)
    return t.hour * 60 + t.minute


def from_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def booking_window(start_time: str, duration: int) -> tuple[int, int]:
    """Return (start, end) minutes for a booking; end may exceed one day"""
    start = to_minutes(start_time)
    return start, start + int(duration)


def slot_covers(slot: dict, start: int, end: int, ignore_booking_id: Optional[str] = None) -> bool:
    """
    A slot can host the window when it is available (or already held by the
    booking being rescheduled) and spans [start, end].
    """
    held_by_self = ignore_booking_id is not None and slot.get("booking_id") == ignore_booking_id
    if not slot.get("is_available") and not held_by_self:
        return False
    if slot.get("booking_id") and not held_by_self:
        return False
    return to_minutes(slot["start_time"]) <= start and to_minutes(slot["end_time"]) >= end


def find_covering_slot(
    slots: list[dict], start: int, end: int, ignore_booking_id: Optional[str] = None
) -> Optional[int]:
    """Index of the first slot covering the window, None when there is none"""
    if end > MINUTES_PER_DAY:
        return None
    for index, slot in enumerate(slots or []):
        if slot_covers(slot, start, end, ignore_booking_id):
            return index
    return None


def release_booking(slots: list[dict], booking_id: str) -> tuple[list[dict], bool]:
    """Free every slot held by ``booking_id``; returns (new_slots, changed)"""
    changed = False
    updated = []
    for slot in slots or []:
        if slot.get("booking_id") == booking_id:
            slot = {**slot, "is_available": True, "booking_id": None}
            changed = True
        updated.append(slot)
    return updated, changed


def claim_for_booking(
    slots: list[dict], booking_id: str, start: int, end: int
) -> tuple[list[dict], bool]:
    """Mark the first covering slot as held by ``booking_id`` (no-op if it already holds one)"""
    slots = list(slots or [])
    if any(slot.get("booking_id") == booking_id for slot in slots):
        return slots, False
    index = find_covering_slot(slots, start, end)
    if index is None:
        return slots, False
    slots[index] = {**slots[index], "is_available": False, "booking_id": booking_id}
    return slots, True


def normalize_slot(slot: dict, default_price: Optional[float] = None) -> dict:
    """Validate and normalise a submitted slot; raises ValueError"""
    if not slot.get("start_time") or not slot.get("end_time"):
        raise ValueError("Each time slot must have start_time and end_time")
    start = normalize_time(slot["start_time"])
    end = normalize_time(slot["end_time"])
    if to_minutes(end) <= to_minutes(start):
        raise ValueError(f"Time slot end time must be after start time ({start}-{end})")
    return {
        "start_time": start,
        "end_time": end,
        "is_available": bool(slot.get("is_available", True)),
        "price": slot["price"] if slot.get("price") is not None else default_price,
        "booking_id": slot.get("booking_id"),
    }


def slot_stats(days: list) -> dict:
    total = available = booked = 0
    for day in days:
        for slot in day.time_slots or []:
            total += 1
            if slot.get("is_available"):
                available += 1
            if slot.get("booking_id"):
                booked += 1
    return {
        "total_slots": total,
        "available_slots": available,
        "booked_slots": booked,
        "utilization_rate": round(booked / total * 100, 2) if total else 0,
        "availability_rate": round(available / total * 100, 2) if total else 0,
    }
