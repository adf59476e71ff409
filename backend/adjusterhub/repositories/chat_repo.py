"""AI assistant conversation repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from adjusterhub.models.chat import ChatMessageModel, ChatSessionModel
from adjusterhub.repositories.base import BaseRepository


class ChatRepository(BaseRepository[ChatSessionModel]):
    def __init__(self, db: Session):
        super().__init__(db, ChatSessionModel)

    def get_for_user(self, session_id: int, user_id: int) -> Optional[ChatSessionModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == session_id, self.model.user_id == user_id)
            .first()
        )

    def list_for_user(self, user_id: int, limit: int = 50) -> List[ChatSessionModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.updated_at.desc(), self.model.id.desc())
            .limit(limit)
            .all()
        )

    def add_message(self, session: ChatSessionModel, role: str, content: str, meta=None) -> ChatMessageModel:
        message = ChatMessageModel(session_id=session.id, role=role, content=content, meta=meta)
        self.db.add(message)
        self.db.flush()
        return message

    def recent_messages(self, session_id: int, limit: int = 20) -> List[ChatMessageModel]:
        rows = (
            self.db.query(ChatMessageModel)
            .filter(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.id.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(rows))
