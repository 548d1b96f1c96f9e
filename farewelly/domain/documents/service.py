"""
Document service - uploads to R2, access control, sharing and deletion.

Access to a document is granted to its owner, to users it is shared with,
and to the parties of any booking the document is attached to.
"""

import json
import logging
import secrets
import time
from typing import Optional

from sqlalchemy.orm import Session

from ... import storage
from ...errors import ApiError
from ...models import Booking, BookingDocument, Document, UserProfile
from ...security_utils import decrypt_bytes, encrypt_bytes, sanitize_text
from ...services.notification_service import notify_users, send_notification
from ...shared.responses import Pagination, paginate
from .repository import DocumentRepository
from .schemas import DocumentUpdate, ShareRequest

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = [
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "text/csv",
]
MAX_FILE_SIZE = 25 * 1024 * 1024  # 25MB
DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]
DOWNLOAD_URL_EXPIRATION = 3600
VIEW_URL_EXPIRATION = 1800


def validate_filename(filename: Optional[str]) -> str:
    if not filename:
        raise ApiError("File name is required", 400)
    for char in DANGEROUS_FILENAME_CHARS:
        if char in filename:
            logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
            raise ApiError(f"Invalid filename - contains dangerous character '{char}'", 400)
    if len(filename) > 255:
        raise ApiError("Filename too long - maximum 255 characters", 400)
    return filename


def build_storage_key(user: UserProfile, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"documents/{user.user_type}/{user.id}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


def parse_share_with(raw: Optional[str]) -> list[str]:
    """share_with arrives as a JSON array string in multipart forms"""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ApiError("Invalid share_with format", 400) from e
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ApiError("Invalid share_with format", 400)
    return list(dict.fromkeys(value))


class DocumentService:
    """Service layer for documents"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DocumentRepository()

    def _get_or_404(self, document_id: str) -> Document:
        document = self.repo.get(self.db, document_id)
        if not document:
            raise ApiError("Document not found", 404)
        return document

    def can_access(self, document: Document, user: UserProfile) -> bool:
        if document.owner_id == user.id or user.id in (document.shared_with or []):
            return True
        return any(user.id in booking.party_ids for booking in self.repo.linked_bookings(self.db, document.id))

    def _validate_share_targets(self, user_ids: list[str]) -> None:
        if len(self.repo.existing_user_ids(self.db, user_ids)) != len(user_ids):
            raise ApiError("Invalid users in share_with list", 400)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_document(
        self,
        user: UserProfile,
        filename: Optional[str],
        content_type: Optional[str],
        contents: bytes,
        title: str,
        document_type: str,
        encrypt: bool = False,
        share_with: Optional[str] = None,
        booking_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Document:
        logger.info(f"📤 Document upload by {user.id}: '{filename}' ({content_type})")

        if not title or not title.strip() or not document_type:
            raise ApiError("File, title, and type are required", 400)
        if content_type not in ALLOWED_MIME_TYPES:
            raise ApiError("File type not allowed", 400)
        if len(contents) > MAX_FILE_SIZE:
            raise ApiError("File size exceeds 25MB limit", 400)
        filename = validate_filename(filename)

        recipients = [uid for uid in parse_share_with(share_with) if uid != user.id]
        self._validate_share_targets(recipients)

        booking = None
        if booking_id:
            booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
            if not booking:
                raise ApiError("Booking not found", 404)
            if user.id not in booking.party_ids:
                raise ApiError("Access denied to booking", 403)

        key = build_storage_key(user, filename)
        body = encrypt_bytes(contents) if encrypt else contents
        try:
            storage.upload_object(key, body, content_type)
        except Exception as e:
            logger.error(f"❌ Upload failed: {e}")
            raise ApiError("Failed to upload file", 500) from e

        try:
            document = Document(
                owner_id=user.id,
                title=sanitize_text(title, max_length=255),
                description=sanitize_text(description),
                document_type=document_type,
                file_name=filename,
                file_path=key,
                file_size=len(contents),
                mime_type=content_type,
                is_encrypted=encrypt,
                shared_with=recipients,
            )
            self.db.add(document)
            self.db.flush()
            if booking:
                self.db.add(BookingDocument(booking_id=booking.id, document_id=document.id, uploaded_by=user.id))
            self.repo.add_shares(self.db, document, user.id, recipients)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save document metadata, removing {key}: {e}")
            try:
                storage.delete_object(key)
            except Exception as cleanup_error:
                logger.error(f"❌ Failed to clean up {key}: {cleanup_error}")
            raise ApiError("Failed to save document metadata", 500) from e

        self.db.refresh(document)
        logger.info(f"✅ Document {document.id} stored at {key} (encrypted={encrypt})")

        notify_users(
            self.db,
            recipients,
            "document",
            "Document Shared",
            f"{user.name} shared a document with you: {document.title}",
            {"document_id": document.id, "shared_by": user.name, "document_title": document.title},
        )
        return document

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_documents(
        self,
        user: UserProfile,
        pagination: Pagination,
        document_type: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> tuple[list[Document], int, dict]:
        query = self.repo.list_visible(self.db, user.id, document_type, booking_id)
        documents, total = paginate(query, pagination)
        owned = query.filter(Document.owner_id == user.id).order_by(None).count()
        return documents, total, {"total": total, "owned": owned, "shared": total - owned}

    def get_document(
        self, document_id: str, user: UserProfile, download: bool = False, view: bool = False
    ) -> tuple[Document, Optional[dict]]:
        document = self._get_or_404(document_id)
        if not self.can_access(document, user):
            raise ApiError("Access denied", 403)

        access_type = "download" if download else "view" if view else "metadata"
        self.repo.log_access(self.db, document.id, user.id, access_type)

        if access_type == "metadata":
            return document, None

        expires_in = DOWNLOAD_URL_EXPIRATION if download else VIEW_URL_EXPIRATION
        try:
            url = storage.generate_presigned_url(
                document.file_path,
                expiration=expires_in,
                download_name=document.file_name if download else None,
            )
        except Exception as e:
            raise ApiError("Failed to generate access URL", 500) from e
        return document, {"url": url, "expires_in": expires_in, "encrypted": document.is_encrypted}

    def get_content(self, document_id: str, user: UserProfile) -> tuple[Document, bytes]:
        """Raw (decrypted when needed) file bytes"""
        document = self._get_or_404(document_id)
        if not self.can_access(document, user):
            raise ApiError("Access denied", 403)

        try:
            body = storage.download_object(document.file_path)
        except Exception as e:
            logger.error(f"❌ Failed to fetch {document.file_path}: {e}")
            raise ApiError("Failed to fetch document content", 500) from e

        if document.is_encrypted:
            try:
                body = decrypt_bytes(body)
            except ValueError as e:
                raise ApiError(str(e), 500) from e

        self.repo.log_access(self.db, document.id, user.id, "download")
        return document, body

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    def update_document(self, document_id: str, data: DocumentUpdate, user: UserProfile) -> Document:
        document = self._get_or_404(document_id)
        if document.owner_id != user.id:
            raise ApiError("Access denied - only owner can modify document", 403)

        if data.title is not None:
            if not data.title.strip():
                raise ApiError("Title cannot be empty", 400)
            document.title = sanitize_text(data.title, max_length=255)
        if data.description is not None:
            document.description = sanitize_text(data.description)
        if data.type is not None:
            document.document_type = data.type
        self.db.commit()
        self.db.refresh(document)
        return document

    def delete_document(self, document_id: str, user: UserProfile) -> None:
        document = self._get_or_404(document_id)
        if document.owner_id != user.id:
            raise ApiError("Access denied - only owner can delete document", 403)

        if any(b.status in ("pending", "confirmed") for b in self.repo.linked_bookings(self.db, document.id)):
            raise ApiError(
                "Cannot delete document associated with active bookings. Complete or cancel bookings first.",
                400,
            )

        try:
            storage.delete_object(document.file_path)
        except Exception as e:
            logger.error(f"❌ Failed to delete file from storage: {e}")

        shared_with = list(document.shared_with or [])
        document.status = "deleted"
        document.shared_with = []
        self.db.commit()
        logger.info(f"🗑️ Document {document.id} deleted by owner {user.id}")

        notify_users(
            self.db,
            shared_with,
            "document",
            "Shared Document Deleted",
            f"{user.name} has deleted a document that was shared with you: {document.title}",
            {"document_title": document.title, "deleted_by": user.name},
        )

    def share_document(self, data: ShareRequest, user: UserProfile) -> dict:
        document = self._get_or_404(data.document_id)
        current = list(document.shared_with or [])
        if document.owner_id != user.id and user.id not in current:
            raise ApiError("Access denied - cannot share this document", 403)

        targets = list(dict.fromkeys(data.share_with))
        if not targets:
            raise ApiError("share_with must contain at least one user", 400)
        self._validate_share_targets(targets)

        new_users = [uid for uid in targets if uid not in current and uid != document.owner_id]
        if not new_users:
            return {"already_shared": True}

        document.shared_with = current + new_users
        self.repo.add_shares(self.db, document, user.id, new_users)
        self.db.commit()
        self.db.refresh(document)

        message = f'{user.name} shared a document with you: "{document.title}"'
        if data.message:
            message = f"{message}. Message: {sanitize_text(data.message)}"
        notify_users(
            self.db,
            new_users,
            "document",
            "Document Shared",
            message,
            {"document_id": document.id, "shared_by": user.name, "shared_by_id": user.id},
        )
        return {
            "already_shared": False,
            "document": document,
            "newly_shared_with": new_users,
            "total_shares": len(document.shared_with),
        }

    def revoke_share(self, document_id: str, user_id: str, user: UserProfile) -> Document:
        document = self._get_or_404(document_id)
        if document.owner_id != user.id:
            raise ApiError("Access denied - only owner can revoke sharing", 403)

        current = list(document.shared_with or [])
        if user_id not in current:
            raise ApiError("User does not have shared access to this document", 400)

        document.shared_with = [uid for uid in current if uid != user_id]
        self.repo.revoke_shares(self.db, document.id, user_id)
        self.db.commit()
        self.db.refresh(document)

        send_notification(
            self.db,
            user_id,
            "document",
            "Document Access Revoked",
            f'{user.name} has revoked your access to document: "{document.title}"',
            {"document_id": document.id, "revoked_by": user.name},
        )
        return document
