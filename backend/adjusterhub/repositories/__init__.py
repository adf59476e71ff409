"""Data access repositories."""

from adjusterhub.repositories.base import BaseRepository
from adjusterhub.repositories.calendar_repo import CalendarEventRepository
from adjusterhub.repositories.chat_repo import ChatRepository
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.document_repo import DocumentRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.repositories.firm_repo import FirmConnectionRepository, FirmRepository
from adjusterhub.repositories.message_repo import MessageRepository
from adjusterhub.repositories.notification_repo import NotificationRepository
from adjusterhub.repositories.security_event_repo import SecurityEventRepository
from adjusterhub.repositories.session_repo import SessionRepository, VerificationTokenRepository
from adjusterhub.repositories.support_repo import SupportMessageRepository, SupportTicketRepository
from adjusterhub.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "FirmRepository",
    "FirmConnectionRepository",
    "ClaimRepository",
    "EarningRepository",
    "MessageRepository",
    "NotificationRepository",
    "DocumentRepository",
    "SessionRepository",
    "VerificationTokenRepository",
    "SecurityEventRepository",
    "ChatRepository",
    "CalendarEventRepository",
    "SupportTicketRepository",
    "SupportMessageRepository",
]
