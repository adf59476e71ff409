"""Security audit event ORM model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.types import JSON

from adjusterhub.database import Base, utcnow


class SecurityEventModel(Base):
    __tablename__ = "security_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, nullable=False, index=True)  # SecurityEventType enum value
    user_id = Column(Integer, index=True)  # no FK: events outlive users and may predate them
    ip_address = Column(String, nullable=False)
    user_agent = Column(String)
    details = Column(JSON, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<SecurityEvent {self.type} ip={self.ip_address}>"
