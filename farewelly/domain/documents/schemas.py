"""Document domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..profiles.schemas import UserSummary


class DocumentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None


class ShareRequest(BaseModel):
    document_id: str
    share_with: list[str]
    message: Optional[str] = None


class DocumentResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    type: str = Field(validation_alias="document_type")
    file_name: str
    file_size: int
    mime_type: str
    is_encrypted: bool
    shared_with: list[str] = []
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    owner: Optional[UserSummary] = None

    class Config:
        from_attributes = True
