"""Support ticket and ticket message ORM models."""

from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adjusterhub.database import Base, utcnow


class SupportTicketModel(Base):
    __tablename__ = "support_tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_number = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    subject = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    status = Column(String, nullable=False, default="OPEN", index=True)  # TicketStatus enum value
    priority = Column(String, nullable=False, default="MEDIUM")  # Priority enum value
    priority_rank = Column(Integer, nullable=False, default=1)  # sortable mirror of priority

    resolved_at = Column(DateTime)
    closed_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("UserModel")
    messages = relationship(
        "SupportMessageModel",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="SupportMessageModel.id",
    )

    @property
    def last_message(self) -> Optional["SupportMessageModel"]:
        return self.messages[-1] if self.messages else None

    def __repr__(self) -> str:
        return f"<SupportTicket id={self.id} number={self.ticket_number} status={self.status}>"


class SupportMessageModel(Base):
    __tablename__ = "support_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("support_tickets.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_from_support = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    ticket = relationship("SupportTicketModel", back_populates="messages")
    sender = relationship("UserModel")

    def __repr__(self) -> str:
        return f"<SupportMessage id={self.id} ticket_id={self.ticket_id}>"
