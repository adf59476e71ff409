"""Login-session and one-time-token repositories."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from adjusterhub.models.session import SessionModel, VerificationTokenModel
from adjusterhub.repositories.base import BaseRepository


class SessionRepository(BaseRepository[SessionModel]):
    def __init__(self, db: Session):
        super().__init__(db, SessionModel)

    def get_live(self, jti: str, now: datetime) -> Optional[SessionModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.jti == jti, self.model.expires_at > now)
            .first()
        )

    def delete_by_jti(self, jti: str) -> int:
        deleted = self.db.query(self.model).filter(self.model.jti == jti).delete()
        self.db.flush()
        return deleted

    def delete_for_user(self, user_id: int) -> int:
        deleted = self.db.query(self.model).filter(self.model.user_id == user_id).delete()
        self.db.flush()
        return deleted

    def delete_expired(self, now: datetime) -> int:
        deleted = self.db.query(self.model).filter(self.model.expires_at <= now).delete()
        self.db.flush()
        return deleted


class VerificationTokenRepository(BaseRepository[VerificationTokenModel]):
    def __init__(self, db: Session):
        super().__init__(db, VerificationTokenModel)

    def find_valid(self, token_hash: str, type: str, now: datetime) -> Optional[VerificationTokenModel]:
        return (
            self.db.query(self.model)
            .filter(
                self.model.token_hash == token_hash,
                self.model.type == type,
                self.model.expires_at > now,
            )
            .first()
        )

    def delete_for_user(self, user_id: int, type: str) -> int:
        deleted = (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id, self.model.type == type)
            .delete()
        )
        self.db.flush()
        return deleted
