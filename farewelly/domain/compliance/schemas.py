"""Dutch compliance schemas (camelCase on the wire)"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ComplianceActionRequest(CamelModel):
    """Body of POST /api/dutch-compliance; which fields matter depends on ``action``"""

    action: Optional[str] = None
    funeral_request_id: Optional[str] = None
    death_registration_date: Optional[datetime] = None
    municipality_code: Optional[str] = None
    municipality_name: Optional[str] = None
    planned_funeral_date: Optional[date] = None
    family_id: Optional[str] = None
    family_name: Optional[str] = None
    director_id: Optional[str] = None
    permit_required: Optional[bool] = None
    alert_id: Optional[str] = None


class MonitorRequest(CamelModel):
    action: Optional[str] = None
    check_interval_minutes: Optional[int] = None


class TrackingResponse(CamelModel):
    id: str
    funeral_request_id: str
    director_id: Optional[str] = None
    family_id: Optional[str] = None
    family_name: Optional[str] = None
    death_registration_date: datetime
    legal_deadline: datetime
    working_days_remaining: Optional[int] = None
    municipality_code: Optional[str] = None
    municipality_name: Optional[str] = None
    planned_funeral_date: Optional[date] = None
    permit_required: bool = False
    bsn_verified: bool = False
    emergency_protocol_active: bool = False
    emergency_triggered_at: Optional[datetime] = None
    compliance_status: str
    last_checked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TimelineEventResponse(CamelModel):
    id: str
    funeral_request_id: str
    event_type: str
    description: Optional[str] = None
    metadata: Optional[dict] = Field(default=None, validation_alias="event_metadata")
    created_at: Optional[datetime] = None


class AlertResponse(CamelModel):
    id: str
    funeral_request_id: str
    alert_type: str
    hours_remaining: Optional[int] = None
    message: str
    action_required: list[str] = []
    stakeholders: list[str] = []
    is_acknowledged: bool = False
    acknowledged_by: Optional[str] = None
    acknowledged_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
