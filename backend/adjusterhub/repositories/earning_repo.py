"""Earning repository."""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from adjusterhub.models.earning import EarningModel
from adjusterhub.repositories.base import BaseRepository
from adjusterhub.schemas.enums import EarningStatus


class EarningRepository(BaseRepository[EarningModel]):
    def __init__(self, db: Session):
        super().__init__(db, EarningModel)

    def _filtered(
        self,
        user_id: int,
        status: Optional[str] = None,
        type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        claim_id: Optional[int] = None,
    ):
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if status:
            query = query.filter(self.model.status == status)
        if type:
            query = query.filter(self.model.type == type)
        if start_date:
            query = query.filter(self.model.created_at >= start_date)
        if end_date:
            query = query.filter(self.model.created_at <= end_date)
        if claim_id is not None:
            query = query.filter(self.model.claim_id == claim_id)
        return query

    def search(self, user_id: int, *, page: int = 1, limit: int = 20, **filters) -> Tuple[List[EarningModel], int]:
        query = self._filtered(user_id, **filters).order_by(
            self.model.created_at.desc(), self.model.id.desc()
        )
        return self.paginate(query, page, limit)

    def all_matching(self, user_id: int, **filters) -> List[EarningModel]:
        return self._filtered(user_id, **filters).all()

    def for_user(self, user_id: int) -> List[EarningModel]:
        return self._filtered(user_id).order_by(self.model.created_at.desc()).all()

    def delete_pending_for_claim(self, claim_id: int, user_id: int) -> int:
        deleted = (
            self.db.query(self.model)
            .filter(
                self.model.claim_id == claim_id,
                self.model.user_id == user_id,
                self.model.status == EarningStatus.PENDING.value,
            )
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return deleted

    def created_since(self, since: Optional[datetime] = None) -> List[EarningModel]:
        """Every user's earnings, optionally only those created at or after ``since``."""
        query = self.db.query(self.model)
        if since is not None:
            query = query.filter(self.model.created_at >= since)
        return query.all()

    def totals_by_user(self) -> Dict[int, float]:
        rows = (
            self.db.query(self.model.user_id, func.sum(self.model.amount))
            .group_by(self.model.user_id)
            .all()
        )
        return {user_id: round(total or 0.0, 2) for user_id, total in rows}
