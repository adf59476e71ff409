"""Service-layer orchestration modules."""

from adjusterhub.services.admin_service import AdminService
from adjusterhub.services.assistant_service import AssistantService
from adjusterhub.services.auth_service import AuthService
from adjusterhub.services.calendar_service import CalendarService
from adjusterhub.services.claim_service import ClaimService
from adjusterhub.services.dashboard_service import DashboardService
from adjusterhub.services.document_service import DocumentService
from adjusterhub.services.earning_service import EarningService
from adjusterhub.services.firm_service import FirmService
from adjusterhub.services.message_service import MessageService
from adjusterhub.services.notification_service import NotificationService
from adjusterhub.services.support_service import SupportService
from adjusterhub.services.user_service import UserService

__all__ = [
    "AuthService",
    "UserService",
    "ClaimService",
    "EarningService",
    "MessageService",
    "NotificationService",
    "DocumentService",
    "FirmService",
    "DashboardService",
    "AssistantService",
    "AdminService",
    "CalendarService",
    "SupportService",
]
