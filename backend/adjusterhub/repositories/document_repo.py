"""Document repository."""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from adjusterhub.models.document import DocumentModel
from adjusterhub.repositories.base import LIKE_ESCAPE, BaseRepository, contains_pattern


class DocumentRepository(BaseRepository[DocumentModel]):
    def __init__(self, db: Session):
        super().__init__(db, DocumentModel)

    def search(
        self,
        user_id: int,
        *,
        type: Optional[str] = None,
        claim_id: Optional[int] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[DocumentModel], int]:
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if type:
            query = query.filter(self.model.type == type)
        if claim_id is not None:
            query = query.filter(self.model.claim_id == claim_id)
        if search:
            like = contains_pattern(search)
            query = query.filter(
                or_(
                    self.model.name.ilike(like, escape=LIKE_ESCAPE),
                    self.model.description.ilike(like, escape=LIKE_ESCAPE),
                )
            )
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)

    def storage_stats(self, user_id: int) -> Dict[str, Any]:
        total_size, total_count = (
            self.db.query(func.coalesce(func.sum(self.model.size), 0), func.count(self.model.id))
            .filter(self.model.user_id == user_id)
            .one()
        )
        breakdown = (
            self.db.query(self.model.type, func.count(self.model.id), func.coalesce(func.sum(self.model.size), 0))
            .filter(self.model.user_id == user_id)
            .group_by(self.model.type)
            .all()
        )
        return {
            "totalSize": int(total_size),
            "totalCount": int(total_count),
            "typeBreakdown": [
                {"type": doc_type, "count": count, "size": int(size)}
                for doc_type, count, size in breakdown
            ],
        }
