"""Calendar event ORM model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class CalendarEventModel(Base):
    __tablename__ = "calendar_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    claim_id = Column(Integer, ForeignKey("claims.id"), index=True)

    title = Column(String, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False, default="MEETING")  # CalendarEventType enum value
    status = Column(String, nullable=False, default="SCHEDULED")  # CalendarEventStatus enum value

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    is_all_day = Column(Boolean, nullable=False, default=False)

    address = Column(String)
    city = Column(String)
    state = Column(String)
    zip_code = Column(String)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    claim = relationship("ClaimModel")

    def __repr__(self) -> str:
        return f"<CalendarEvent id={self.id} user_id={self.user_id} start={self.start_time}>"
