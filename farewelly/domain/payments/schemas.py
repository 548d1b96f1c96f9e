"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class SplitInput(BaseModel):
    """recipient_id "platform" books the split to the platform itself"""

    recipient_id: str
    amount: float
    percentage: Optional[float] = None


class PaymentCreate(BaseModel):
    booking_id: str
    amount: float
    payment_method: str
    payment_token: Optional[str] = None
    description: Optional[str] = None
    splits: Optional[list[SplitInput]] = None


class RefundRequest(BaseModel):
    amount: Optional[float] = None
    reason: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Invalid refund amount")
        return v


class SplitAction(BaseModel):
    split_ids: list[str]
    action: str


class PaymentSplitResponse(BaseModel):
    id: str
    payment_id: str
    recipient_id: Optional[str] = None
    recipient_type: str
    amount: float
    percentage: Optional[float] = None
    status: str
    refunded_amount: float = 0.0
    paid_at: Optional[datetime] = None
    payout_requested_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentRefundResponse(BaseModel):
    id: str
    payment_id: str
    amount: float
    refund_fee: float
    net_refund_amount: float
    reason: Optional[str] = None
    requested_by: str
    status: str
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: str
    booking_id: str
    family_id: str
    amount: float
    currency: str
    payment_method: Optional[str] = None
    status: str
    transaction_id: Optional[str] = None
    description: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    splits: list[PaymentSplitResponse] = []
    refunds: list[PaymentRefundResponse] = []

    class Config:
        from_attributes = True
