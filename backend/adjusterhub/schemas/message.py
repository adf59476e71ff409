"""Message schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel, Pagination


class MessageCreate(APIModel):
    recipient_id: int
    content: str = Field(min_length=1, max_length=5000)
    subject: Optional[str] = Field(default=None, max_length=200)
    claim_id: Optional[int] = None
    firm_id: Optional[int] = None


class Participant(APIModel):
    id: int
    first_name: str
    last_name: str


class Message(APIModel):
    id: int
    sender_id: int
    recipient_id: int
    claim_id: Optional[int] = None
    firm_id: Optional[int] = None
    subject: Optional[str] = None
    content: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    sender: Optional[Participant] = None
    recipient: Optional[Participant] = None


class MessageList(APIModel):
    messages: List[Message]
    pagination: Pagination
    unread_count: int
