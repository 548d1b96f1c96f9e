"""Payment repository - Database operations for payments, splits and refunds"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Payment, PaymentSplit, UserProfile


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def list_for_user(db: Session, user: UserProfile, status: Optional[str] = None):
        query = db.query(Payment).options(selectinload(Payment.splits), selectinload(Payment.refunds))
        if user.user_type == "family":
            query = query.filter(Payment.family_id == user.id)
        else:
            query = query.filter(Payment.splits.any(PaymentSplit.recipient_id == user.id))
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.created_at.desc())

    @staticmethod
    def get(db: Session, payment_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    @staticmethod
    def completed_for_booking(db: Session, booking_id: str) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.booking_id == booking_id, Payment.status == "completed")
            .first()
        )

    @staticmethod
    def list_splits(
        db: Session,
        recipient_id: str,
        status: Optional[str] = None,
        payment_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        query = db.query(PaymentSplit).filter(PaymentSplit.recipient_id == recipient_id)
        if status:
            query = query.filter(PaymentSplit.status == status)
        if payment_id:
            query = query.filter(PaymentSplit.payment_id == payment_id)
        if start_date:
            query = query.filter(PaymentSplit.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(PaymentSplit.created_at <= datetime.combine(end_date, time.max))
        return query.order_by(PaymentSplit.created_at.desc())

    @staticmethod
    def get_splits_for_recipient(db: Session, split_ids: list[str], recipient_id: str) -> list[PaymentSplit]:
        return (
            db.query(PaymentSplit)
            .options(selectinload(PaymentSplit.payment))
            .filter(PaymentSplit.id.in_(split_ids), PaymentSplit.recipient_id == recipient_id)
            .all()
        )
