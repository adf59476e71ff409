"""Notification repository."""

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.models.notification import NotificationModel
from adjusterhub.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[NotificationModel]):
    def __init__(self, db: Session):
        super().__init__(db, NotificationModel)

    def search(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        type: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[NotificationModel], int]:
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if unread_only:
            query = query.filter(self.model.is_read.is_(False))
        if type:
            query = query.filter(self.model.type == type)
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.is_read.is_(False))
            .count()
        )

    def mark_read(self, user_id: int, notification_ids: Optional[List[int]] = None) -> int:
        """Mark the given (or all) unread notifications of a user as read."""
        query = self.db.query(self.model).filter(
            self.model.user_id == user_id, self.model.is_read.is_(False)
        )
        if notification_ids is not None:
            query = query.filter(self.model.id.in_(notification_ids))
        updated = query.update({self.model.is_read: True}, synchronize_session="fetch")
        self.db.flush()
        return updated
