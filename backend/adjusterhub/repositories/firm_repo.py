"""Firm and firm-connection repositories."""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from adjusterhub.models.claim import ClaimModel
from adjusterhub.models.firm import FirmConnectionModel, FirmModel
from adjusterhub.repositories.base import LIKE_ESCAPE, BaseRepository, contains_pattern
from adjusterhub.schemas.enums import ClaimStatus, ConnectionStatus


class FirmRepository(BaseRepository[FirmModel]):
    def __init__(self, db: Session):
        super().__init__(db, FirmModel)

    def get_by_name(self, name: str) -> Optional[FirmModel]:
        return self.db.query(self.model).filter(self.model.name == name).first()

    def search(
        self,
        *,
        search: Optional[str] = None,
        state: Optional[str] = None,
        active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[FirmModel], int]:
        query = self.db.query(self.model)
        if active is not None:
            query = query.filter(self.model.is_active.is_(active))
        if state:
            query = query.filter(self.model.state == state)
        if search:
            like = contains_pattern(search)
            query = query.filter(
                or_(
                    self.model.name.ilike(like, escape=LIKE_ESCAPE),
                    self.model.description.ilike(like, escape=LIKE_ESCAPE),
                    self.model.city.ilike(like, escape=LIKE_ESCAPE),
                )
            )
        query = query.order_by(self.model.rating.desc(), self.model.name.asc())
        return self.paginate(query, page, limit)

    def count_active(self) -> int:
        return self.db.query(self.model).filter(self.model.is_active.is_(True)).count()

    def available_claim_counts(self, firm_ids: List[int]) -> Dict[int, int]:
        if not firm_ids:
            return {}
        rows = (
            self.db.query(ClaimModel.firm_id, func.count(ClaimModel.id))
            .filter(ClaimModel.firm_id.in_(firm_ids))
            .filter(ClaimModel.status == ClaimStatus.AVAILABLE.value)
            .group_by(ClaimModel.firm_id)
            .all()
        )
        return {firm_id: count for firm_id, count in rows}


class FirmConnectionRepository(BaseRepository[FirmConnectionModel]):
    def __init__(self, db: Session):
        super().__init__(db, FirmConnectionModel)

    def get_for(self, user_id: int, firm_id: int) -> Optional[FirmConnectionModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.firm_id == firm_id)
            .first()
        )

    def is_approved(self, user_id: int, firm_id: int) -> bool:
        conn = self.get_for(user_id, firm_id)
        return conn is not None and conn.status == ConnectionStatus.APPROVED.value

    def search(
        self,
        *,
        user_id: Optional[int] = None,
        firm_id: Optional[int] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[FirmConnectionModel], int]:
        query = self.db.query(self.model)
        if user_id is not None:
            query = query.filter(self.model.user_id == user_id)
        if firm_id is not None:
            query = query.filter(self.model.firm_id == firm_id)
        if status:
            query = query.filter(self.model.status == status)
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)
