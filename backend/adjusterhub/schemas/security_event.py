"""Security audit event schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from adjusterhub.schemas.common import APIModel, Pagination


class SecurityEvent(APIModel):
    id: int
    type: str
    user_id: Optional[int] = None
    ip_address: str
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class SecurityEventList(APIModel):
    events: List[SecurityEvent]
    pagination: Pagination
