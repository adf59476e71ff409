"""Message repository."""

from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from adjusterhub.models.message import MessageModel
from adjusterhub.repositories.base import BaseRepository


class MessageRepository(BaseRepository[MessageModel]):
    def __init__(self, db: Session):
        super().__init__(db, MessageModel)

    def search(
        self,
        user_id: int,
        *,
        unread_only: bool = False,
        claim_id: Optional[int] = None,
        firm_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[MessageModel], int]:
        query = (
            self.db.query(self.model)
            .options(joinedload(self.model.sender), joinedload(self.model.recipient))
            .filter(or_(self.model.sender_id == user_id, self.model.recipient_id == user_id))
        )
        if unread_only:
            query = query.filter(
                self.model.recipient_id == user_id, self.model.is_read.is_(False)
            )
        if claim_id is not None:
            query = query.filter(self.model.claim_id == claim_id)
        if firm_id is not None:
            query = query.filter(self.model.firm_id == firm_id)
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(self.model)
            .filter(self.model.recipient_id == user_id, self.model.is_read.is_(False))
            .count()
        )
