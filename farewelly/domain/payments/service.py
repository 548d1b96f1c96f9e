"""Payment service - charges, refunds and the payout ledger"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import Booking, Payment, PaymentRefund, PaymentSplit, UserProfile
from ...security_utils import sanitize_text
from ...services.notification_service import notify_users, send_notification
from ...shared.responses import Pagination, paginate
from ...shared.validators import parse_date
from .repository import PaymentRepository
from .schemas import PaymentCreate, RefundRequest, SplitAction

logger = logging.getLogger(__name__)

PLATFORM_FEE_PERCENTAGE = 5
DIRECTOR_SHARE = 0.7
MIN_CHARGE = 1
MAX_CHARGE = 10000
SPLIT_ACTIONS = {"mark_paid": "paid", "request_payout": "payout_requested"}
PAYABLE_BOOKING_STATUSES = ("confirmed", "completed")
REFUNDABLE_PAYMENT_STATUSES = ("completed", "partial_refunded")


def money(value: float) -> float:
    return round(value, 2)


@dataclass
class RefundPolicy:
    allowed: bool
    fee_percentage: float = 0.0
    reason: Optional[str] = None

    def as_dict(self) -> dict:
        return {"allowed": self.allowed, "fee_percentage": self.fee_percentage, "reason": self.reason}


def refund_policy(user_type: str, days_since_payment: float, booking_status: str) -> RefundPolicy:
    """
    Families get a free refund within a day of a completed service and pay
    10% up to a week; before the service is completed they pay 5% up to 30
    days. Providers refund with a 3% fee up to 90 days.
    """
    if user_type == "family":
        if booking_status == "completed":
            if days_since_payment <= 1:
                return RefundPolicy(True, 0.0)
            if days_since_payment <= 7:
                return RefundPolicy(True, 0.1)
            return RefundPolicy(False, reason="Refund period has expired")
        if days_since_payment <= 30:
            return RefundPolicy(True, 0.05)
        return RefundPolicy(False, reason="Refunds not allowed more than 30 days after payment")

    if user_type in ("director", "venue"):
        if days_since_payment <= 90:
            return RefundPolicy(True, 0.03)
        return RefundPolicy(False, reason="Refunds not allowed more than 90 days after payment")

    return RefundPolicy(False, reason="Invalid user type for refund")


def default_splits(amount: float, booking: Booking) -> list[dict]:
    """Platform takes 5%; the rest goes 70/30 to director and venue, or all to whichever exists"""
    platform_fee = money(amount * PLATFORM_FEE_PERCENTAGE / 100)
    remaining = money(amount - platform_fee)
    splits = [
        {"recipient_id": None, "recipient_type": "platform", "amount": platform_fee, "percentage": 5}
    ]

    if booking.director_id and booking.venue_id:
        director_amount = money(remaining * DIRECTOR_SHARE)
        splits.append(
            {"recipient_id": booking.director_id, "recipient_type": "director", "amount": director_amount, "percentage": 70}
        )
        splits.append(
            {"recipient_id": booking.venue_id, "recipient_type": "venue", "amount": money(remaining - director_amount), "percentage": 30}
        )
    elif booking.director_id:
        splits.append(
            {"recipient_id": booking.director_id, "recipient_type": "director", "amount": remaining, "percentage": 95}
        )
    elif booking.venue_id:
        splits.append(
            {"recipient_id": booking.venue_id, "recipient_type": "venue", "amount": remaining, "percentage": 95}
        )
    return splits


def distribute_refund(splits: list[PaymentSplit], refund_amount: float) -> None:
    """Take the refund out of every split in proportion to its current amount"""
    total = sum(split.amount for split in splits)
    if total <= 0:
        return
    for split in splits:
        share = split.amount / total * refund_amount
        split.amount = money(max(0.0, split.amount - share))
        split.refunded_amount = money((split.refunded_amount or 0) + share)


def process_charge(amount: float, payment_method: str, payment_token: Optional[str] = None) -> dict:
    """Stand-in for the payment provider: rejects charges below 1 or above 10000"""
    if amount < MIN_CHARGE:
        return {"success": False, "status": "failed", "error": "Amount too small"}
    if amount > MAX_CHARGE:
        return {"success": False, "status": "failed", "error": "Amount exceeds limit"}
    return {"success": True, "status": "completed", "provider_id": f"pay_{uuid.uuid4().hex[:16]}"}


class PaymentService:
    """Service layer for payments"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def list_payments(
        self, user: UserProfile, pagination: Pagination, status: Optional[str] = None
    ) -> tuple[list[Payment], int, dict]:
        query = self.repo.list_for_user(self.db, user, status)
        payments, total = paginate(query, pagination)

        everything = query.all()
        refunded = sum(r.amount for p in everything for r in p.refunds)
        stats = {
            "total_payments": total,
            "total_amount": money(sum(p.amount for p in everything)),
            "completed_amount": money(sum(p.amount for p in everything if p.status == "completed")),
            "pending_amount": money(sum(p.amount for p in everything if p.status == "pending")),
            "refunded_amount": money(refunded),
        }
        return payments, total, stats

    def _resolve_splits(self, data: PaymentCreate, booking: Booking) -> list[dict]:
        if not data.splits:
            return default_splits(data.amount, booking)

        parties = {booking.director_id: "director", booking.venue_id: "venue"}
        resolved = []
        for split in data.splits:
            if split.recipient_id == "platform":
                recipient_id, recipient_type = None, "platform"
            elif split.recipient_id in parties and split.recipient_id:
                recipient_id, recipient_type = split.recipient_id, parties[split.recipient_id]
            else:
                raise ApiError("Split recipients must be the platform or a booking provider", 400)
            resolved.append(
                {
                    "recipient_id": recipient_id,
                    "recipient_type": recipient_type,
                    "amount": money(split.amount),
                    "percentage": split.percentage,
                }
            )
        return resolved

    def create_payment(self, data: PaymentCreate, user: UserProfile) -> Payment:
        logger.info(f"📥 Payment of {data.amount} requested for booking {data.booking_id}")

        if user.user_type != "family":
            raise ApiError("Only families can process payments", 403)

        booking = self.db.query(Booking).filter(Booking.id == data.booking_id).first()
        if not booking:
            raise ApiError("Booking not found", 404)
        if booking.family_id != user.id:
            raise ApiError("Access denied - can only pay for your own bookings", 403)
        if booking.status not in PAYABLE_BOOKING_STATUSES:
            raise ApiError("Booking must be confirmed before payment", 400)
        if self.repo.completed_for_booking(self.db, booking.id):
            raise ApiError("Booking has already been paid", 400)
        if data.amount <= 0:
            raise ApiError("Payment amount must be greater than 0", 400)

        splits = self._resolve_splits(data, booking)
        if abs(sum(s["amount"] for s in splits) - data.amount) > 0.01:
            raise ApiError("Payment splits must total the payment amount", 400)

        result = process_charge(data.amount, data.payment_method, data.payment_token)
        payment = Payment(
            booking_id=booking.id,
            family_id=user.id,
            amount=money(data.amount),
            currency="EUR",
            payment_method=data.payment_method,
            status=result["status"],
            transaction_id=result.get("provider_id"),
            description=sanitize_text(data.description),
        )
        self.db.add(payment)

        if not result["success"]:
            self.db.commit()
            logger.warning(f"⚠️ Payment for booking {booking.id} failed: {result['error']}")
            raise ApiError("Payment processing failed", 400)

        payment.processed_at = datetime.utcnow()
        self.db.flush()
        for split in splits:
            self.db.add(PaymentSplit(payment_id=payment.id, status="pending", **split))
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"✅ Payment {payment.id} completed with {len(splits)} splits")

        for party_id, label in ((booking.director_id, "booking"), (booking.venue_id, "venue booking")):
            send_notification(
                self.db,
                party_id,
                "payment",
                "Payment Received",
                f"Payment of €{payment.amount} received for {label} on {booking.date}",
                {"payment_id": payment.id, "booking_id": booking.id, "amount": payment.amount, "from": user.name},
            )
        return payment

    def refund_payment(self, payment_id: str, data: RefundRequest, user: UserProfile) -> tuple[Payment, PaymentRefund, RefundPolicy]:
        payment = self.repo.get(self.db, payment_id)
        if not payment:
            raise ApiError("Payment not found", 404)
        booking = payment.booking
        if user.id not in booking.party_ids:
            raise ApiError("Access denied - cannot refund this payment", 403)
        if payment.status not in REFUNDABLE_PAYMENT_STATUSES:
            raise ApiError("Can only refund completed payments", 400)

        already_refunded = sum(r.amount for r in payment.refunds)
        available = money(payment.amount - already_refunded)
        if available <= 0:
            raise ApiError("Payment has already been fully refunded", 400)

        amount = money(data.amount) if data.amount is not None else available
        if amount > available:
            raise ApiError(f"Refund amount exceeds the available amount of €{available}", 400)

        paid_at = payment.processed_at or payment.created_at or datetime.utcnow()
        days_since_payment = (datetime.utcnow() - paid_at).total_seconds() / 86400
        policy = refund_policy(user.user_type, days_since_payment, booking.status)
        if not policy.allowed:
            raise ApiError(policy.reason, 400)

        fee = money(amount * policy.fee_percentage)
        refund = PaymentRefund(
            payment_id=payment.id,
            amount=amount,
            refund_fee=fee,
            net_refund_amount=money(amount - fee),
            reason=sanitize_text(data.reason) or "Customer request",
            requested_by=user.id,
            status="completed",
            processed_at=datetime.utcnow(),
        )
        self.db.add(refund)

        payment.status = "refunded" if already_refunded + amount >= payment.amount - 0.001 else "partial_refunded"
        distribute_refund(payment.splits, amount)
        self.db.commit()
        self.db.refresh(payment)
        self.db.refresh(refund)
        logger.info(f"✅ Refund {refund.id} of {amount} on payment {payment.id} ({payment.status})")

        data_payload = {"payment_id": payment.id, "refund_id": refund.id, "refund_amount": amount, "booking_id": booking.id}
        send_notification(
            self.db,
            booking.family_id,
            "payment",
            "Refund Processed",
            f"Refund of €{amount} has been processed for your payment",
            data_payload,
        )
        notify_users(
            self.db,
            [booking.director_id, booking.venue_id],
            "payment",
            "Payment Refunded",
            f"A refund of €{amount} has been processed for booking on {booking.date}",
            data_payload,
            exclude=user.id,
        )
        return payment, refund, policy

    # ------------------------------------------------------------------
    # Splits
    # ------------------------------------------------------------------

    def list_splits(
        self,
        user: UserProfile,
        pagination: Pagination,
        status: Optional[str] = None,
        payment_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> tuple[list[PaymentSplit], int, dict]:
        try:
            start = parse_date(start_date) if start_date else None
            end = parse_date(end_date) if end_date else None
        except ValueError as e:
            raise ApiError("Invalid date format", 400) from e

        query = self.repo.list_splits(self.db, user.id, status, payment_id, start, end)
        splits, total = paginate(query, pagination)

        everything = query.all()
        total_amount = sum(s.amount for s in everything)
        refunded = sum(s.refunded_amount or 0 for s in everything)
        stats = {
            "total_splits": total,
            "total_amount": money(total_amount),
            "paid_amount": money(sum(s.amount for s in everything if s.status == "paid")),
            "pending_amount": money(sum(s.amount for s in everything if s.status == "pending")),
            "refunded_amount": money(refunded),
            "net_amount": money(total_amount - refunded),
        }
        return splits, total, stats

    def update_splits(self, data: SplitAction, user: UserProfile) -> tuple[list[PaymentSplit], float]:
        if not data.split_ids:
            raise ApiError("split_ids array is required", 400)
        if data.action not in SPLIT_ACTIONS:
            raise ApiError("Invalid action. Must be 'mark_paid' or 'request_payout'", 400)

        splits = self.repo.get_splits_for_recipient(self.db, data.split_ids, user.id)
        if not splits:
            raise ApiError("No valid splits found", 404)

        if any(split.status != "pending" for split in splits):
            if data.action == "mark_paid":
                raise ApiError("Can only mark pending splits as paid", 400)
            raise ApiError("Can only request payout for pending splits", 400)
        if any(split.payment.status not in REFUNDABLE_PAYMENT_STATUSES for split in splits):
            raise ApiError("Can only update splits for completed payments", 400)

        now = datetime.utcnow()
        for split in splits:
            split.status = SPLIT_ACTIONS[data.action]
            if data.action == "mark_paid":
                split.paid_at = now
            else:
                split.payout_requested_at = now
        self.db.commit()
        for split in splits:
            self.db.refresh(split)

        total_amount = money(sum(split.amount for split in splits))
        logger.info(f"✅ {len(splits)} splits -> {SPLIT_ACTIONS[data.action]} for {user.id} (€{total_amount})")

        if data.action == "request_payout":
            send_notification(
                self.db,
                user.id,
                "payment",
                "Payout Requested",
                f"Your payout request for €{total_amount} has been submitted and will be processed within 3-5 business days",
                {"split_ids": [s.id for s in splits], "total_amount": total_amount, "estimated_processing_days": "3-5"},
            )
        return splits, total_amount
