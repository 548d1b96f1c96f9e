"""
In-app notifications.

Notifications are a best-effort side effect: a failed insert is logged and
never fails the request that triggered it.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..models import Notification

logger = logging.getLogger(__name__)


def send_notification(
    db: Session,
    user_id: Optional[str],
    notification_type: str,
    title: str,
    message: str,
    data: Optional[dict] = None,
) -> Optional[Notification]:
    """Insert an unread notification for ``user_id``; returns None on failure"""
    if not user_id:
        return None
    try:
        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            data=data or {},
            is_read=False,
        )
        db.add(notification)
        db.commit()
        logger.debug(f"🔔 {notification_type} notification sent to {user_id}")
        return notification
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to send {notification_type} notification to {user_id}: {e}")
        return None


def notify_users(
    db: Session,
    user_ids: Iterable[Optional[str]],
    notification_type: str,
    title: str,
    message: str,
    data: Optional[dict] = None,
    exclude: Optional[str] = None,
) -> int:
    """Fan a notification out to several users, skipping blanks and ``exclude``"""
    sent = 0
    for user_id in dict.fromkeys(user_ids):
        if not user_id or user_id == exclude:
            continue
        if send_notification(db, user_id, notification_type, title, message, data):
            sent += 1
    return sent
