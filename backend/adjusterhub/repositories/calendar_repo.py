"""Calendar event repository."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from adjusterhub.models.calendar import CalendarEventModel
from adjusterhub.repositories.base import BaseRepository
from adjusterhub.schemas.enums import CalendarEventStatus


class CalendarEventRepository(BaseRepository[CalendarEventModel]):
    def __init__(self, db: Session):
        super().__init__(db, CalendarEventModel)

    def get_for_user(self, event_id: int, user_id: int) -> Optional[CalendarEventModel]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == event_id, self.model.user_id == user_id)
            .first()
        )

    def search(
        self,
        user_id: int,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        type: Optional[str] = None,
    ) -> List[CalendarEventModel]:
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if start is not None:
            query = query.filter(self.model.start_time >= start)
        if end is not None:
            query = query.filter(self.model.start_time <= end)
        if type:
            query = query.filter(self.model.type == type)
        return query.order_by(self.model.start_time.asc(), self.model.id.asc()).all()

    def overlapping(
        self, user_id: int, start: datetime, end: datetime, exclude_id: Optional[int] = None
    ) -> List[CalendarEventModel]:
        """Non-cancelled events of ``user_id`` sharing any time with ``[start, end)``."""
        query = self.db.query(self.model).filter(
            self.model.user_id == user_id,
            self.model.status != CalendarEventStatus.CANCELLED.value,
            self.model.start_time < end,
            self.model.end_time > start,
        )
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        return query.order_by(self.model.start_time.asc()).all()
