"""SQLAlchemy ORM models, imported here so Base.metadata sees them."""

from adjusterhub.models.calendar import CalendarEventModel
from adjusterhub.models.chat import ChatMessageModel, ChatSessionModel
from adjusterhub.models.claim import ClaimModel
from adjusterhub.models.document import DocumentModel
from adjusterhub.models.earning import EarningModel
from adjusterhub.models.firm import FirmConnectionModel, FirmModel
from adjusterhub.models.message import MessageModel
from adjusterhub.models.notification import NotificationModel
from adjusterhub.models.security_event import SecurityEventModel
from adjusterhub.models.session import SessionModel, VerificationTokenModel
from adjusterhub.models.support import SupportMessageModel, SupportTicketModel
from adjusterhub.models.user import UserModel

__all__ = [
    "UserModel",
    "FirmModel",
    "FirmConnectionModel",
    "ClaimModel",
    "EarningModel",
    "MessageModel",
    "NotificationModel",
    "DocumentModel",
    "SessionModel",
    "VerificationTokenModel",
    "SecurityEventModel",
    "ChatSessionModel",
    "ChatMessageModel",
    "CalendarEventModel",
    "SupportTicketModel",
    "SupportMessageModel",
]
