"""Payment router - payments, refunds and payment splits"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import (
    PaymentCreate,
    PaymentRefundResponse,
    PaymentResponse,
    PaymentSplitResponse,
    RefundRequest,
    SplitAction,
)
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])

providers_only = require_user_type(
    "director", "venue", message="Access denied - only service providers can view payment splits"
)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


# ============================================================================
# PAYMENT SPLITS (declared before /{payment_id} routes)
# ============================================================================


@router.get("/splits")
async def list_splits(
    status: Optional[str] = Query(None),
    payment_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(providers_only),
    service: PaymentService = Depends(get_payment_service),
):
    splits, total, stats = service.list_splits(
        current_user, pagination, status, payment_id, start_date, end_date
    )
    return success_response(
        {
            "splits": [PaymentSplitResponse.model_validate(s) for s in splits],
            "stats": stats,
            "user_role": current_user.user_type,
            "filters": {
                "status": status,
                "payment_id": payment_id,
                "start_date": start_date,
                "end_date": end_date,
            },
        },
        "Payment splits retrieved successfully",
        pagination.info(total),
    )


@router.put("/splits")
async def update_splits(
    data: SplitAction,
    current_user: UserProfile = Depends(providers_only),
    service: PaymentService = Depends(get_payment_service),
):
    splits, total_amount = service.update_splits(data, current_user)
    message = (
        "Payment splits marked as paid successfully"
        if data.action == "mark_paid"
        else "Payout request submitted successfully"
    )
    return success_response(
        {
            "updated_splits": [PaymentSplitResponse.model_validate(s) for s in splits],
            "action": data.action,
            "total_amount": total_amount,
        },
        message,
    )


# ============================================================================
# PAYMENTS
# ============================================================================


@router.get("")
async def list_payments(
    status: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payments, total, stats = service.list_payments(current_user, pagination, status)
    return success_response(
        {
            "payments": [PaymentResponse.model_validate(p) for p in payments],
            "stats": stats,
            "user_role": current_user.user_type,
        },
        "Payments retrieved successfully",
        pagination.info(total),
    )


@router.post("", status_code=201)
async def create_payment(
    data: PaymentCreate,
    current_user: UserProfile = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payment = service.create_payment(data, current_user)
    return success_response(PaymentResponse.model_validate(payment), "Payment processed successfully")


@router.post("/{payment_id}/refund")
async def refund_payment(
    payment_id: str,
    data: RefundRequest,
    current_user: UserProfile = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payment, refund, policy = service.refund_payment(payment_id, data, current_user)
    refund_data = PaymentRefundResponse.model_validate(refund).model_dump()
    refund_data["policy_applied"] = policy.as_dict()
    return success_response(
        {"payment": PaymentResponse.model_validate(payment), "refund": refund_data},
        "Refund processed successfully",
    )


__all__ = ["router"]
