"""Director client schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import CLIENT_STATUSES
from ..profiles.schemas import UserSummary


class ClientCreate(BaseModel):
    """Schema for adding a family as a director's client"""

    family_id: str
    notes: Optional[str] = None
    tags: Optional[list[str]] = None


class ClientUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in CLIENT_STATUSES:
            raise ValueError("Invalid status. Must be 'active', 'inactive' or 'archived'")
        return v


class ClientResponse(BaseModel):
    id: str
    director_id: str
    family_id: str
    status: str
    notes: Optional[str] = None
    tags: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    family: Optional[UserSummary] = None

    class Config:
        from_attributes = True
