"""In-app notifications."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adjusterhub.dependencies import get_current_user, get_notification_service
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.common import Pagination
from adjusterhub.schemas.enums import NotificationType
from adjusterhub.schemas.notification import (
    MarkReadRequest,
    MarkReadResponse,
    Notification,
    NotificationCreate,
    NotificationList,
)
from adjusterhub.security.sanitize import sanitize_input, sanitize_text
from adjusterhub.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationList)
def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    type: Optional[NotificationType] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationList:
    items, total, unread = service.list_for(
        user, unread_only=unread_only, type=type.value if type else None, page=page, limit=limit
    )
    return NotificationList(
        notifications=[Notification.model_validate(n) for n in items],
        pagination=Pagination.build(page, limit, total),
        unread_count=unread,
    )


@router.post("", response_model=Notification, status_code=201)
def create_notification(
    payload: NotificationCreate,
    user: UserModel = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> Notification:
    """Notify yourself, or (admins only) another user via ``userId``."""
    notification = service.create(
        user,
        payload.type,
        sanitize_text(payload.title),
        sanitize_input(payload.message),
        payload.data,
        target_user_id=payload.user_id,
    )
    return Notification.model_validate(notification)


@router.post("/mark-read", response_model=MarkReadResponse)
def mark_read(
    payload: MarkReadRequest,
    user: UserModel = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> MarkReadResponse:
    updated = service.mark_read(user, payload.notification_ids, mark_all=payload.mark_all_read)
    return MarkReadResponse(updated_count=updated)
