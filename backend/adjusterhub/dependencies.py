"""Dependency injection / factory functions for FastAPI.

Singletons come from the lazily created ``AppContainer``; every service is
constructed per request around the request's database session.
"""

from typing import Iterator, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from adjusterhub.config import Settings
from adjusterhub.container import AppContainer
from adjusterhub.errors import AppError
from adjusterhub.logging_config import bind_request_context
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.calendar_repo import CalendarEventRepository
from adjusterhub.repositories.chat_repo import ChatRepository
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.document_repo import DocumentRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.repositories.firm_repo import FirmConnectionRepository, FirmRepository
from adjusterhub.repositories.message_repo import MessageRepository
from adjusterhub.repositories.notification_repo import NotificationRepository
from adjusterhub.repositories.session_repo import SessionRepository, VerificationTokenRepository
from adjusterhub.repositories.support_repo import SupportMessageRepository, SupportTicketRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.enums import Role
from adjusterhub.security.sanitize import ClientInfo
from adjusterhub.security.tokens import SessionClaims
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

_container: Optional[AppContainer] = None


def get_container() -> AppContainer:
    global _container
    if _container is None:
        _container = AppContainer()
    return _container


def get_settings() -> Settings:
    return get_container().settings()


def get_db() -> Iterator[Session]:
    db = get_container().session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo.from_request(request)


# ── Per-request services ────────────────────────────────────────────────

def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db, NotificationRepository(db), UserRepository(db))


def get_auth_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> AuthService:
    c = get_container()
    return AuthService(
        db=db,
        user_repo=UserRepository(db),
        session_repo=SessionRepository(db),
        token_repo=VerificationTokenRepository(db),
        notification_service=notifications,
        hasher=c.password_hasher(),
        codec=c.token_codec(),
        totp=c.totp(),
        audit=c.audit_log(),
        email_client=c.email_client(),
        two_factor_limiter=c.rate_limiters()["2fa"],
        settings=c.settings(),
    )


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(
        db, UserRepository(db), SessionRepository(db), FirmRepository(db), get_container().cache()
    )


def get_claim_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> ClaimService:
    return ClaimService(
        db=db,
        claim_repo=ClaimRepository(db),
        user_repo=UserRepository(db),
        firm_repo=FirmRepository(db),
        connection_repo=FirmConnectionRepository(db),
        earning_repo=EarningRepository(db),
        notification_service=notifications,
        cache=get_container().cache(),
    )


def get_earning_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> EarningService:
    return EarningService(db, EarningRepository(db), ClaimRepository(db), notifications, get_container().cache())


def get_message_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> MessageService:
    return MessageService(db, MessageRepository(db), UserRepository(db), notifications)


def get_document_service(db: Session = Depends(get_db)) -> DocumentService:
    c = get_container()
    settings = c.settings()
    return DocumentService(
        db,
        DocumentRepository(db),
        ClaimRepository(db),
        c.audit_log(),
        storage_dir=settings.storage_dir,
        max_upload_bytes=settings.max_upload_bytes,
    )


def get_firm_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> FirmService:
    return FirmService(
        db, FirmRepository(db), FirmConnectionRepository(db), notifications, get_container().cache()
    )


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(
        ClaimRepository(db),
        EarningRepository(db),
        NotificationRepository(db),
        MessageRepository(db),
        get_container().cache(),
    )


def get_assistant_service(db: Session = Depends(get_db)) -> AssistantService:
    c = get_container()
    return AssistantService(
        db,
        ChatRepository(db),
        ClaimRepository(db),
        EarningRepository(db),
        llm_client=c.llm_client(),
        prompts=c.prompt_manager(),
    )


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(
        UserRepository(db),
        FirmRepository(db),
        ClaimRepository(db),
        EarningRepository(db),
        DocumentRepository(db),
        get_container().cache(),
    )


def get_calendar_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> CalendarService:
    return CalendarService(db, CalendarEventRepository(db), ClaimRepository(db), notifications)


def get_support_service(
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> SupportService:
    return SupportService(
        db,
        SupportTicketRepository(db),
        SupportMessageRepository(db),
        notifications,
        get_container().email_client(),
    )


# ── Authentication ──────────────────────────────────────────────────────

def session_token(request: Request) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(get_settings().session_cookie_name) or None


def get_current_session(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Tuple[UserModel, SessionClaims]:
    token = session_token(request)
    if not token:
        raise AppError.authentication("Authentication required")
    user, claims = auth.authenticate(token)
    request.state.user_id = user.id
    bind_request_context(user_id=user.id)
    return user, claims


def get_current_user(current: Tuple[UserModel, SessionClaims] = Depends(get_current_session)) -> UserModel:
    return current[0]


def require_roles(*roles: Role):
    """Dependency factory: 403 unless the current user has one of ``roles``."""
    allowed = {role.value for role in roles}

    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in allowed:
            raise AppError.authorization("Insufficient permissions")
        return user

    return dependency
