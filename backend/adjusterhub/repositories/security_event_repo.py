"""Security audit event repository."""

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from adjusterhub.models.security_event import SecurityEventModel
from adjusterhub.repositories.base import BaseRepository


class SecurityEventRepository(BaseRepository[SecurityEventModel]):
    def __init__(self, db: Session):
        super().__init__(db, SecurityEventModel)

    def search(
        self,
        *,
        type: Optional[str] = None,
        user_id: Optional[int] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[SecurityEventModel], int]:
        query = self.db.query(self.model)
        if type:
            query = query.filter(self.model.type == type)
        if user_id is not None:
            query = query.filter(self.model.user_id == user_id)
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)
