"""Notification router"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import NotificationResponse
from .service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    items, total, unread_count = service.list_notifications(current_user, pagination, unread_only)
    return success_response(
        [NotificationResponse.model_validate(n) for n in items],
        pagination=pagination.info(total),
        unread_count=unread_count,
    )


# read-all must be declared before /{notification_id}/read
@router.put("/read-all")
async def mark_all_read(
    current_user: UserProfile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_read(current_user)
    return success_response({"updated": updated}, "All notifications marked as read")


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user: UserProfile = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.mark_read(notification_id, current_user)
    return success_response(NotificationResponse.model_validate(notification), "Notification marked as read")


__all__ = ["router"]
