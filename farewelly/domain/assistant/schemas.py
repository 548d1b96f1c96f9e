"""Assistant schemas - AI chat and intake reports"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field


class ChatTurn(BaseModel):
    """One earlier message of the conversation as sent back by the client"""

    role: str = Field(default="user", validation_alias=AliasChoices("role", "type"))
    content: str = Field(default="", validation_alias=AliasChoices("content", "message"))


class AiChatRequest(BaseModel):
    message: Optional[Any] = None
    history: list[ChatTurn] = Field(default_factory=list, validation_alias=AliasChoices("history", "chatHistory"))
    intake_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("intakeId", "intake_id"))
    current_step: Optional[int] = Field(default=None, validation_alias=AliasChoices("currentStep", "current_step"))
    step_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("stepName", "step_name"))
    form_data: Optional[dict] = Field(default=None, validation_alias=AliasChoices("formData", "form_data"))


class IntakeReportRequest(BaseModel):
    intake_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("intakeId", "intake_id"))
    form_data: Optional[dict] = Field(default=None, validation_alias=AliasChoices("formData", "form_data"))


class IntakeReportResponse(BaseModel):
    id: str
    user_id: str
    intake_id: Optional[str] = None
    report: dict
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
