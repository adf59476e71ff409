"""Pydantic schemas for request/response validation and shared enums."""

from adjusterhub.schemas.common import APIModel, Pagination
from adjusterhub.schemas.enums import (
    CalendarEventStatus,
    CalendarEventType,
    ClaimStatus,
    ClaimType,
    ConnectionStatus,
    DocumentType,
    EarningStatus,
    EarningType,
    NotificationType,
    Priority,
    Role,
    SecurityEventType,
    TicketStatus,
    TokenType,
)

__all__ = [
    "APIModel", "Pagination",
    "Role", "ClaimStatus", "ClaimType", "Priority",
    "EarningStatus", "EarningType", "NotificationType",
    "ConnectionStatus", "TokenType", "DocumentType", "SecurityEventType",
    "CalendarEventType", "CalendarEventStatus", "TicketStatus",
]
