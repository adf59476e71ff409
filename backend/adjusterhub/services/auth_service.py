"""Authentication flows: login with optional 2FA, registration, sessions,
password reset, email verification, and TOTP enrolment.

Every outcome that matters for security is written to the audit log.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from adjusterhub.clients.email_client import EmailClient
from adjusterhub.config import Settings
from adjusterhub.database import utcnow
from adjusterhub.engines.rate_limiter import FixedWindowRateLimiter
from adjusterhub.errors import AppError, classify_error
from adjusterhub.models.session import SessionModel, VerificationTokenModel
from adjusterhub.models.user import UserModel
from adjusterhub.repositories.session_repo import SessionRepository, VerificationTokenRepository
from adjusterhub.repositories.user_repo import UserRepository
from adjusterhub.schemas.auth import LoginRequest, RegisterRequest, ResetPasswordRequest
from adjusterhub.schemas.enums import NotificationType, Role, SecurityEventType, TokenType
from adjusterhub.security.audit import SecurityAuditLog
from adjusterhub.security.passwords import PasswordHasher, validate_password_strength
from adjusterhub.security.sanitize import ClientInfo, sanitize_text
from adjusterhub.security.tokens import (
    IssuedToken,
    SessionClaims,
    SessionTokenCodec,
    generate_opaque_token,
    hash_token,
)
from adjusterhub.security.totp import TOTPHelper
from adjusterhub.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)
VERIFY_TOKEN_TTL = timedelta(hours=24)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, we've sent a password reset link."
RESEND_VERIFICATION_MESSAGE = "If that account needs verification, a new link has been sent."


@dataclass
class LoginResult:
    user: Optional[UserModel] = None
    session: Optional[IssuedToken] = None
    requires_two_factor: bool = False


class AuthService:
    def __init__(
        self,
        db: Session,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        token_repo: VerificationTokenRepository,
        notification_service: NotificationService,
        hasher: PasswordHasher,
        codec: SessionTokenCodec,
        totp: TOTPHelper,
        audit: SecurityAuditLog,
        email_client: EmailClient,
        two_factor_limiter: FixedWindowRateLimiter,
        settings: Settings,
    ):
        self.db = db
        self.users = user_repo
        self.sessions = session_repo
        self.tokens = token_repo
        self.notifications = notification_service
        self.hasher = hasher
        self.codec = codec
        self.totp = totp
        self.audit = audit
        self.email = email_client
        self.two_factor_limiter = two_factor_limiter
        self.settings = settings

    # ── login ────────────────────────────────────────────────────────

    def login(self, payload: Any, client: ClientInfo) -> LoginResult:
        """Validate credentials (and a TOTP code when 2FA is on) and open a session.

        Returns a result with ``requires_two_factor`` set, and no session,
        when the password is right but the second factor is still missing.
        """
        try:
            request = LoginRequest.model_validate(payload)
        except ValidationError as exc:
            self.audit.record(
                SecurityEventType.AUTH_ATTEMPT, client.ip, client.user_agent, action="validation_failed"
            )
            raise classify_error(exc) from exc

        email = sanitize_text(str(request.email)).lower()
        try:
            return self._login(request, email, client)
        except AppError:
            raise
        except Exception as exc:
            self.db.rollback()
            logger.exception("Login failed unexpectedly for %s", email)
            raise AppError.internal(f"login failed: {exc}", user_message="Login failed") from exc

    def _login(self, request: LoginRequest, email: str, client: ClientInfo) -> LoginResult:
        user = self.users.get_by_email(email)
        if user is None or not user.password_hash:
            self._auth_failure(client, None, "user_not_found", email=email)
            raise AppError.authentication("Invalid credentials")

        if not self.hasher.verify(request.password, user.password_hash):
            self._auth_failure(client, user.id, "invalid_password", email=email)
            raise AppError.authentication("Invalid credentials")

        if not user.is_active:
            self._auth_failure(client, user.id, "account_deactivated", email=email)
            raise AppError.authentication("Account is deactivated")

        if user.two_factor_enabled:
            if not request.two_factor_token:
                logger.info("Login for user %d awaiting second factor", user.id)
                return LoginResult(requires_two_factor=True)
            if not self.totp.verify(user.two_factor_secret, request.two_factor_token):
                self._auth_failure(client, user.id, "invalid_2fa", email=email)
                raise AppError.authentication("Invalid two-factor authentication code")

        user.last_login_at = utcnow()
        issued = self._open_session(user, client)
        self.db.commit()

        self.audit.record(
            SecurityEventType.AUTH_SUCCESS, client.ip, client.user_agent, user_id=user.id, email=email
        )
        return LoginResult(user=user, session=issued)

    def _auth_failure(self, client: ClientInfo, user_id: Optional[int], reason: str, **details: Any) -> None:
        self.audit.record(
            SecurityEventType.AUTH_FAILURE, client.ip, client.user_agent, user_id=user_id, reason=reason, **details
        )

    # ── sessions ─────────────────────────────────────────────────────

    def _open_session(self, user: UserModel, client: ClientInfo) -> IssuedToken:
        issued = self.codec.issue(user.id, user.email, user.role)
        self.sessions.create(
            SessionModel(
                user_id=user.id,
                jti=issued.jti,
                token_hash=hash_token(issued.token),
                ip_address=client.ip,
                user_agent=(client.user_agent or "")[:512],
                expires_at=issued.expires_at,
            )
        )
        return issued

    def authenticate(self, token: str) -> Tuple[UserModel, SessionClaims]:
        """Resolve a session token to its active user, or raise 401 "Invalid session"."""
        claims = self.codec.decode(token)
        if claims is None:
            raise AppError.authentication("Invalid session")
        session = self.sessions.get_live(claims.jti, utcnow())
        if session is None or session.token_hash != hash_token(token):
            raise AppError.authentication("Invalid session")
        user = self.users.get(claims.user_id)
        if user is None or not user.is_active:
            raise AppError.authentication("Invalid session")
        return user, claims

    def logout(self, user: UserModel, claims: SessionClaims, client: ClientInfo) -> None:
        self.sessions.delete_by_jti(claims.jti)
        self.db.commit()
        self.audit.record(
            SecurityEventType.AUTH_ATTEMPT, client.ip, client.user_agent, user_id=user.id, action="logout"
        )

    def revoke_all_sessions(self, user_id: int) -> int:
        revoked = self.sessions.delete_for_user(user_id)
        logger.info("Revoked %d sessions for user %d", revoked, user_id)
        return revoked

    # ── registration & email verification ────────────────────────────

    def register(self, request: RegisterRequest, client: ClientInfo) -> Tuple[UserModel, IssuedToken]:
        email = str(request.email).lower()
        if self.users.get_by_email(email) is not None:
            raise AppError.conflict("User already exists")
        self._check_password_policy(request.password)

        user = self.users.create(
            UserModel(
                email=email,
                password_hash=self.hasher.hash(request.password),
                first_name=sanitize_text(request.first_name),
                last_name=sanitize_text(request.last_name),
                role=Role.ADJUSTER.value,
                phone=request.phone,
                license_number=request.license_number,
                specialties=[sanitize_text(s) for s in request.specialties],
                years_experience=request.years_experience,
                hourly_rate=request.hourly_rate,
                travel_radius=request.travel_radius,
                address=sanitize_text(request.address) or None,
                city=sanitize_text(request.city) or None,
                state=sanitize_text(request.state) or None,
                zip_code=request.zip_code,
                last_login_at=utcnow(),
            )
        )
        raw_token = self._issue_one_time_token(user, TokenType.VERIFY_EMAIL, VERIFY_TOKEN_TTL)
        self.notifications.notify(
            user.id,
            NotificationType.SYSTEM_UPDATE,
            "Welcome to AdjusterHub!",
            "Your account has been created. Verify your email address to get started.",
        )
        issued = self._open_session(user, client)
        self.db.commit()

        self.audit.record(
            SecurityEventType.AUTH_SUCCESS, client.ip, client.user_agent, user_id=user.id, action="register"
        )
        self.email.send_verification_email(user.email, user.first_name, raw_token)
        return user, issued

    def verify_email(self, token: str) -> UserModel:
        record = self.tokens.find_valid(hash_token(token), TokenType.VERIFY_EMAIL.value, utcnow())
        user = self.users.get(record.user_id) if record else None
        if user is None:
            raise AppError.validation("Invalid or expired verification token")
        user.email_verified = True
        self.tokens.delete_for_user(user.id, TokenType.VERIFY_EMAIL.value)
        self.db.commit()
        logger.info("Email verified for user %d", user.id)
        self.email.send_welcome_email(user.email, user.first_name)
        return user

    def resend_verification(self, email: str) -> str:
        user = self.users.get_by_email(email.lower())
        if user is not None and user.is_active and not user.email_verified:
            raw_token = self._issue_one_time_token(user, TokenType.VERIFY_EMAIL, VERIFY_TOKEN_TTL)
            self.db.commit()
            self.email.send_verification_email(user.email, user.first_name, raw_token)
        return RESEND_VERIFICATION_MESSAGE

    # ── password reset ───────────────────────────────────────────────

    def forgot_password(self, email: str, client: ClientInfo) -> str:
        """Start a reset; the reply is identical whether or not the account exists."""
        user = self.users.get_by_email(email.lower())
        if user is not None and user.is_active:
            raw_token = self._issue_one_time_token(user, TokenType.RESET_PASSWORD, RESET_TOKEN_TTL)
            self.db.commit()
            self.email.send_password_reset_email(user.email, user.first_name, raw_token)
        self.audit.record(
            SecurityEventType.AUTH_ATTEMPT,
            client.ip,
            client.user_agent,
            user_id=user.id if user else None,
            action="password_reset_requested",
        )
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, request: ResetPasswordRequest, client: ClientInfo) -> None:
        self._check_password_policy(request.password)
        record = self.tokens.find_valid(hash_token(request.token), TokenType.RESET_PASSWORD.value, utcnow())
        user = self.users.get(record.user_id) if record else None
        if user is None:
            raise AppError.validation("Invalid or expired reset token")

        user.password_hash = self.hasher.hash(request.password)
        self.tokens.delete_for_user(user.id, TokenType.RESET_PASSWORD.value)
        self.revoke_all_sessions(user.id)
        self.notifications.notify(
            user.id,
            NotificationType.SECURITY_ALERT,
            "Password changed",
            "Your password was reset and all sessions were signed out.",
        )
        self.db.commit()
        self.audit.record(
            SecurityEventType.AUTH_ATTEMPT, client.ip, client.user_agent, user_id=user.id, action="password_reset"
        )

    # ── two-factor authentication ────────────────────────────────────

    def setup_two_factor(self, user: UserModel) -> Tuple[str, str]:
        if user.two_factor_enabled:
            raise AppError.validation("2FA is already enabled")
        secret = self.totp.generate_secret()
        user.two_factor_secret = secret
        self.db.commit()
        return secret, self.totp.provisioning_uri(secret, user.email)

    def verify_two_factor(self, user: UserModel, token: str, client: ClientInfo) -> bool:
        """Check a TOTP code; the first valid code enables 2FA. Returns True if it was just enabled."""
        key = f"2fa:{user.id}"
        decision = self.two_factor_limiter.acquire(key)
        if not decision.allowed:
            self.audit.record(
                SecurityEventType.RATE_LIMIT_EXCEEDED, client.ip, client.user_agent, user_id=user.id, rule="2fa"
            )
            raise AppError.rate_limit(
                self.two_factor_limiter.rule.message, context={"retry_after": decision.retry_after}
            )
        if not user.two_factor_secret:
            raise AppError.validation("2FA setup has not been started")
        if not self.totp.verify(user.two_factor_secret, token):
            self._auth_failure(client, user.id, "invalid_2fa_setup_token")
            raise AppError.validation("Invalid 2FA token")

        if user.two_factor_enabled:
            return False
        user.two_factor_enabled = True
        self.notifications.notify(
            user.id, NotificationType.SECURITY_ALERT, "Two-factor authentication enabled",
            "Sign-ins now require a code from your authenticator app.",
        )
        self.db.commit()
        return True

    def disable_two_factor(self, user: UserModel, password: str) -> None:
        if not self.hasher.verify(password, user.password_hash):
            raise AppError.validation("Invalid password")
        user.two_factor_enabled = False
        user.two_factor_secret = None
        self.notifications.notify(
            user.id, NotificationType.SECURITY_ALERT, "Two-factor authentication disabled",
            "Sign-ins no longer require an authenticator code.",
        )
        self.db.commit()

    # ── helpers ──────────────────────────────────────────────────────

    def _check_password_policy(self, password: str) -> None:
        strength = validate_password_strength(password)
        if not strength.valid:
            raise AppError.validation(
                "Password does not meet requirements",
                context={
                    "errors": [
                        {"loc": ["password"], "msg": message, "type": "password_strength"}
                        for message in strength.feedback
                    ]
                },
            )

    def _issue_one_time_token(self, user: UserModel, type: TokenType, ttl: timedelta) -> str:
        """Replace any outstanding token of ``type`` and return the new raw value."""
        self.tokens.delete_for_user(user.id, type.value)
        raw = generate_opaque_token()
        self.tokens.create(
            VerificationTokenModel(
                user_id=user.id,
                type=type.value,
                token_hash=hash_token(raw),
                expires_at=utcnow() + ttl,
            )
        )
        return raw
