"""Notification service - a user's in-app notification inbox"""

import logging

from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import Notification, UserProfile
from ...shared.responses import Pagination, paginate

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def _unread(self, user_id: str):
        return self.db.query(Notification).filter(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )

    def list_notifications(
        self, user: UserProfile, pagination: Pagination, unread_only: bool = False
    ) -> tuple[list[Notification], int, int]:
        """Newest first; returns (items, total, unread_count)"""
        query = self._unread(user.id) if unread_only else self.db.query(Notification).filter(
            Notification.user_id == user.id
        )
        items, total = paginate(query.order_by(Notification.created_at.desc()), pagination)
        return items, total, self._unread(user.id).count()

    def mark_read(self, notification_id: str, user: UserProfile) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user.id)
            .first()
        )
        if not notification:
            raise ApiError("Notification not found", 404)
        if not notification.is_read:
            notification.is_read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, user: UserProfile) -> int:
        updated = self._unread(user.id).update({Notification.is_read: True}, synchronize_session=False)
        self.db.commit()
        logger.info(f"🔔 Marked {updated} notifications read for {user.id}")
        return updated
