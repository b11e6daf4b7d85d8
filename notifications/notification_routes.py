from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from auth.auth import get_current_user
from common.errors import NotFoundError
from notifications.notification_model import Notification
from notifications.notification_repo import NotificationRepo, get_notification_repo


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
async def list_notifications(
    user_id: str = Depends(get_current_user),
    repo: NotificationRepo = Depends(get_notification_repo),
) -> List[Notification]:
    return await repo.list_recent(user_id)


@router.patch("/{notification_id}/read", response_model=Notification)
async def mark_notification_read(
    notification_id: str,
    user_id: str = Depends(get_current_user),
    repo: NotificationRepo = Depends(get_notification_repo),
) -> Notification:
    notification = await repo.get_for_user(user_id, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    return await repo.mark_read(notification.id)
