"""AI assistant schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from adjusterhub.schemas.common import APIModel


class ChatRequest(APIModel):
    message: str = Field(min_length=1, max_length=4000)
    session_id: Optional[int] = None


class AssistantAction(APIModel):
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class ChatResponse(APIModel):
    session_id: int
    message: str
    actions: List[AssistantAction] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    fallback: bool = False


class ChatMessage(APIModel):
    id: int
    role: str
    content: str
    created_at: datetime


class ChatSession(APIModel):
    id: int
    title: str
    created_at: datetime
    updated_at: datetime


class ChatSessionDetail(ChatSession):
    messages: List[ChatMessage] = Field(default_factory=list)
