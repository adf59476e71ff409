"""Support ticket repositories."""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from adjusterhub.models.support import SupportMessageModel, SupportTicketModel
from adjusterhub.repositories.base import BaseRepository


class SupportTicketRepository(BaseRepository[SupportTicketModel]):
    def __init__(self, db: Session):
        super().__init__(db, SupportTicketModel)

    def get_for_user(self, ticket_id: int, user_id: int) -> Optional[SupportTicketModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == ticket_id, self.model.user_id == user_id)
            .first()
        )

    def number_taken(self, ticket_number: str) -> bool:
        return self.db.query(self.model.id).filter(self.model.ticket_number == ticket_number).first() is not None

    def search(
        self,
        user_id: int,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[SupportTicketModel], int]:
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if status:
            query = query.filter(self.model.status == status)
        if priority:
            query = query.filter(self.model.priority == priority)
        if category:
            query = query.filter(self.model.category == category)
        query = query.order_by(self.model.priority_rank.desc(), self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)

    def status_counts(self, user_id: int) -> Dict[str, int]:
        rows = (
            self.db.query(self.model.status, func.count(self.model.id))
            .filter(self.model.user_id == user_id)
            .group_by(self.model.status)
            .all()
        )
        return {status: count for status, count in rows}


class SupportMessageRepository(BaseRepository[SupportMessageModel]):
    def __init__(self, db: Session):
        super().__init__(db, SupportMessageModel)
