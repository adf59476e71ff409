"""In-app notifications: creation, listing, and read tracking."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.errors import AppError
from adjusterhub.models.notification import NotificationModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.notification_repo import NotificationRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.enums import NotificationType, Role

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: Session, notification_repo: NotificationRepository, user_repo: UserRepository):
        self.db = db
        self.notifications = notification_repo
        self.users = user_repo

    def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> NotificationModel:
        """Queue a notification in the current transaction (caller commits)."""
        notification = self.notifications.create(
            NotificationModel(user_id=user_id, type=type.value, title=title, message=message, data=data)
        )
        logger.debug("Notification %s queued for user %d", type.value, user_id)
        return notification

    def list_for(
        self, user: UserModel, *, unread_only: bool = False, type: Optional[str] = None, page: int = 1, limit: int = 20
    ) -> Tuple[List[NotificationModel], int, int]:
        items, total = self.notifications.search(
            user.id, unread_only=unread_only, type=type, page=page, limit=limit
        )
        return items, total, self.notifications.unread_count(user.id)

    def create(
        self,
        actor: UserModel,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        target_user_id: Optional[int] = None,
    ) -> NotificationModel:
        target_id = target_user_id or actor.id
        if target_id != actor.id:
            if actor.role != Role.ADMIN.value:
                raise AppError.authorization("Cannot create notifications for other users")
            if self.users.get(target_id) is None:
                raise AppError.not_found("User")
        notification = self.notify(target_id, type, title, message, data)
        self.db.commit()
        return notification

    def mark_read(
        self, user: UserModel, notification_ids: Optional[List[int]] = None, mark_all: bool = False
    ) -> int:
        if mark_all:
            updated = self.notifications.mark_read(user.id)
        elif notification_ids:
            updated = self.notifications.mark_read(user.id, notification_ids)
        else:
            raise AppError.validation("Either notificationIds or markAllRead must be provided")
        self.db.commit()
        return updated
