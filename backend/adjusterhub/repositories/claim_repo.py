"""Claim repository."""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from adjusterhub.models.claim import ClaimModel
from adjusterhub.repositories.base import LIKE_ESCAPE, BaseRepository, contains_pattern
from adjusterhub.schemas.enums import ClaimStatus


class ClaimRepository(BaseRepository[ClaimModel]):
    def __init__(self, db: Session):
        super().__init__(db, ClaimModel)

    def count_created_between(self, start: datetime, end: datetime) -> int:
        return (
            self.db.query(self.model)
            .filter(self.model.created_at >= start, self.model.created_at < end)
            .count()
        )

    def search(
        self,
        *,
        status: Optional[str] = None,
        type: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        firm_id: Optional[int] = None,
        assigned: Optional[bool] = None,
        visible_to_adjuster: Optional[int] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ClaimModel], int]:
        """Filtered, ordered page of claims.

        ``visible_to_adjuster`` restricts results to AVAILABLE claims plus
        those assigned to that adjuster.
        """
        query = self.db.query(self.model)
        if status:
            query = query.filter(self.model.status == status)
        if type:
            query = query.filter(self.model.type == type)
        if priority:
            query = query.filter(self.model.priority == priority)
        if firm_id is not None:
            query = query.filter(self.model.firm_id == firm_id)
        if assigned is True:
            query = query.filter(self.model.adjuster_id.isnot(None))
        elif assigned is False:
            query = query.filter(self.model.adjuster_id.is_(None))
        if search:
            like = contains_pattern(search)
            query = query.filter(
                or_(
                    self.model.title.ilike(like, escape=LIKE_ESCAPE),
                    self.model.description.ilike(like, escape=LIKE_ESCAPE),
                    self.model.claim_number.ilike(like, escape=LIKE_ESCAPE),
                    self.model.city.ilike(like, escape=LIKE_ESCAPE),
                )
            )
        if visible_to_adjuster is not None:
            query = query.filter(
                or_(
                    self.model.status == ClaimStatus.AVAILABLE.value,
                    self.model.adjuster_id == visible_to_adjuster,
                )
            )

        query = query.order_by(
            self.model.priority_rank.desc(),
            self.model.deadline.is_(None),
            self.model.deadline.asc(),
            self.model.created_at.desc(),
        )
        return self.paginate(query, page, limit)

    def active_for_adjuster(self, adjuster_id: int) -> List[ClaimModel]:
        return (
            self.db.query(self.model)
            .filter(
                and_(
                    self.model.adjuster_id == adjuster_id,
                    self.model.status.in_(
                        [ClaimStatus.ASSIGNED.value, ClaimStatus.IN_PROGRESS.value]
                    ),
                )
            )
            .all()
        )

    def get_by_number(self, claim_number: str) -> Optional[ClaimModel]:
        return self.db.query(self.model).filter(self.model.claim_number == claim_number).first()

    def _scoped(self, adjuster_id: Optional[int] = None, firm_id: Optional[int] = None):
        query = self.db.query(self.model)
        if adjuster_id is not None:
            query = query.filter(self.model.adjuster_id == adjuster_id)
        if firm_id is not None:
            query = query.filter(self.model.firm_id == firm_id)
        return query

    def status_counts(self, *, adjuster_id: Optional[int] = None, firm_id: Optional[int] = None) -> Dict[str, int]:
        rows = (
            self._scoped(adjuster_id, firm_id)
            .with_entities(self.model.status, func.count(self.model.id))
            .group_by(self.model.status)
            .all()
        )
        return {status: count for status, count in rows}

    def recent(
        self, *, adjuster_id: Optional[int] = None, firm_id: Optional[int] = None, limit: int = 5
    ) -> List[ClaimModel]:
        return (
            self._scoped(adjuster_id, firm_id)
            .order_by(self.model.updated_at.desc(), self.model.id.desc())
            .limit(limit)
            .all()
        )

    def type_stats(self, *, adjuster_id: Optional[int] = None) -> List[Tuple[str, int, Optional[float]]]:
        """``(type, count, average estimated value)`` rows ordered by type."""
        rows = (
            self._scoped(adjuster_id)
            .with_entities(self.model.type, func.count(self.model.id), func.avg(self.model.estimated_value))
            .group_by(self.model.type)
            .order_by(self.model.type)
            .all()
        )
        return [(type_, count, avg) for type_, count, avg in rows]

    def completed(self, *, adjuster_id: Optional[int] = None, since: Optional[datetime] = None) -> List[ClaimModel]:
        """Completed claims, most recently completed first."""
        query = self._scoped(adjuster_id).filter(self.model.status == ClaimStatus.COMPLETED.value)
        if since is not None:
            query = query.filter(self.model.completed_at >= since)
        return query.order_by(self.model.completed_at.desc(), self.model.id.desc()).all()

    def completed_counts_by_adjuster(self) -> Dict[int, int]:
        rows = (
            self.db.query(self.model.adjuster_id, func.count(self.model.id))
            .filter(self.model.status == ClaimStatus.COMPLETED.value, self.model.adjuster_id.isnot(None))
            .group_by(self.model.adjuster_id)
            .all()
        )
        return {adjuster_id: count for adjuster_id, count in rows}
