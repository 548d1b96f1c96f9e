"""Document repository - Database operations for documents and their shares"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Booking, BookingDocument, Document, DocumentAccessLog, DocumentShare, UserProfile


class DocumentRepository:
    """Repository for document database operations"""

    @staticmethod
    def get(db: Session, document_id: str) -> Optional[Document]:
        return (
            db.query(Document)
            .filter(Document.id == document_id, Document.status == "active")
            .first()
        )

    @staticmethod
    def list_visible(
        db: Session, user_id: str, document_type: Optional[str] = None, booking_id: Optional[str] = None
    ):
        """Active documents the user owns or holds an unrevoked share for"""
        shared_ids = db.query(DocumentShare.document_id).filter(
            DocumentShare.shared_with == user_id, DocumentShare.revoked_at.is_(None)
        )
        query = (
            db.query(Document)
            .options(joinedload(Document.owner))
            .filter(
                Document.status == "active",
                or_(Document.owner_id == user_id, Document.id.in_(shared_ids)),
            )
        )
        if document_type:
            query = query.filter(Document.document_type == document_type)
        if booking_id:
            linked = db.query(BookingDocument.document_id).filter(BookingDocument.booking_id == booking_id)
            query = query.filter(Document.id.in_(linked))
        return query.order_by(Document.created_at.desc())

    @staticmethod
    def linked_bookings(db: Session, document_id: str) -> list[Booking]:
        return (
            db.query(Booking)
            .join(BookingDocument, BookingDocument.booking_id == Booking.id)
            .filter(BookingDocument.document_id == document_id)
            .all()
        )

    @staticmethod
    def existing_user_ids(db: Session, user_ids: list[str]) -> set:
        if not user_ids:
            return set()
        rows = db.query(UserProfile.id).filter(UserProfile.id.in_(user_ids)).all()
        return {row[0] for row in rows}

    @staticmethod
    def add_shares(db: Session, document: Document, shared_by: str, user_ids: list[str]) -> None:
        for user_id in user_ids:
            db.add(DocumentShare(document_id=document.id, shared_by=shared_by, shared_with=user_id))

    @staticmethod
    def revoke_shares(db: Session, document_id: str, user_id: str) -> int:
        shares = (
            db.query(DocumentShare)
            .filter(
                DocumentShare.document_id == document_id,
                DocumentShare.shared_with == user_id,
                DocumentShare.revoked_at.is_(None),
            )
            .all()
        )
        now = datetime.utcnow()
        for share in shares:
            share.revoked_at = now
        return len(shares)

    @staticmethod
    def log_access(db: Session, document_id: str, user_id: str, access_type: str) -> None:
        db.add(DocumentAccessLog(document_id=document_id, user_id=user_id, access_type=access_type))
        db.commit()
