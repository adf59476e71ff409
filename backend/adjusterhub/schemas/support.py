"""Support ticket schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import Priority, Role, TicketStatus


class TicketCreate(APIModel):
    subject: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10, max_length=5000)
    category: str = Field(min_length=1, max_length=100)
    priority: Priority = Priority.MEDIUM


class TicketReply(APIModel):
    content: str = Field(min_length=1, max_length=5000)


class TicketUpdate(APIModel):
    status: Optional[TicketStatus] = None
    priority: Optional[Priority] = None


class TicketSender(APIModel):
    first_name: str
    last_name: str
    role: Role


class TicketMessage(APIModel):
    id: int
    ticket_id: int
    sender_id: int
    content: str
    is_from_support: bool
    created_at: datetime
    sender: Optional[TicketSender] = None


class Ticket(APIModel):
    id: int
    ticket_number: str
    user_id: int
    subject: str
    description: str
    category: str
    status: TicketStatus
    priority: Priority
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TicketSummary(Ticket):
    last_message: Optional[TicketMessage] = None


class TicketDetail(Ticket):
    messages: List[TicketMessage] = Field(default_factory=list)


class TicketList(APIModel):
    tickets: List[TicketSummary]
    pagination: Pagination
    stats: Dict[str, int]
