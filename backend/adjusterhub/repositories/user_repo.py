"""User repository."""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from adjusterhub.models.user import UserModel
from adjusterhub.repositories.base import LIKE_ESCAPE, BaseRepository, contains_pattern


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, db: Session):
        super().__init__(db, UserModel)

    def get_by_email(self, email: str) -> Optional[UserModel]:
        return self.db.query(self.model).filter(self.model.email == email.lower()).first()

    def search(
        self,
        *,
        search: Optional[str] = None,
        role: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[UserModel], int]:
        query = self.db.query(self.model)
        if role:
            query = query.filter(self.model.role == role)
        if search:
            like = contains_pattern(search)
            query = query.filter(
                or_(
                    self.model.email.ilike(like, escape=LIKE_ESCAPE),
                    self.model.first_name.ilike(like, escape=LIKE_ESCAPE),
                    self.model.last_name.ilike(like, escape=LIKE_ESCAPE),
                )
            )
        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return self.paginate(query, page, limit)

    def count_active(self) -> int:
        return self.db.query(self.model).filter(self.model.is_active.is_(True)).count()

    def signup_dates_since(self, since: datetime) -> List[datetime]:
        rows = self.db.query(self.model.created_at).filter(self.model.created_at >= since).all()
        return [created_at for (created_at,) in rows]

    def recent_logins(self, since: datetime, limit: int = 10) -> List[UserModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.last_login_at >= since)
            .order_by(self.model.last_login_at.desc())
            .limit(limit)
            .all()
        )

    def active_with_role(self, role: str) -> List[UserModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.role == role, self.model.is_active.is_(True))
            .all()
        )
