"""Chat schemas"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class MessageCreate(BaseModel):
    room_id: str
    content: str = Field(validation_alias=AliasChoices("content", "message"))
    message_type: str = "text"
    metadata: Optional[dict] = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError("Missing required fields: content")
        return v

    @field_validator("message_type")
    @classmethod
    def validate_message_type(cls, v):
        if v not in ("text", "file", "system"):
            raise ValueError("Invalid message type")
        return v


class RoomCreate(BaseModel):
    room_type: str
    participant_ids: list[str]
    title: Optional[str] = None
    booking_id: Optional[str] = None


class ParticipantResponse(BaseModel):
    user_id: str
    user_type: str
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    id: str
    room_id: str
    sender_id: str
    content: str
    message_type: str
    metadata: Optional[dict] = Field(default=None, validation_alias="message_metadata")
    read_by: list[str] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoomResponse(BaseModel):
    id: str
    room_type: str
    title: Optional[str] = None
    booking_id: Optional[str] = None
    created_by: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    participants: list[ParticipantResponse] = []

    class Config:
        from_attributes = True
