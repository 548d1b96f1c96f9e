"""Venue directory schemas"""

from typing import Optional

from pydantic import BaseModel


class VenueListing(BaseModel):
    id: str
    name: str
    venue_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    capacity: Optional[int] = None
    price_per_hour: Optional[float] = None

    class Config:
        from_attributes = True
