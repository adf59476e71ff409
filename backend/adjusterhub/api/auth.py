"""Authentication endpoints: login, registration, sessions, password reset,
email verification and two-factor setup.

Login takes a raw JSON body so malformed input can be audited before it is
rejected.
"""

import secrets
from typing import Any, Tuple

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import RedirectResponse

from adjusterhub.config import Settings
from adjusterhub.dependencies import (
    get_auth_service,
    get_client_info,
    get_current_session,
    get_current_user,
    get_settings,
)
from adjusterhub.errors import AppError
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.auth import (
    CsrfTokenResponse,
    ForgotPasswordRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    TwoFactorChallenge,
    TwoFactorDisableRequest,
    TwoFactorSetupResponse,
    TwoFactorVerifyRequest,
    VerifyEmailRequest,
)
from adjusterhub.schemas.user import UserProfile, UserSummary
from adjusterhub.security.sanitize import ClientInfo
from adjusterhub.security.tokens import IssuedToken, SessionClaims
from adjusterhub.services.auth_service import AuthService

logger = get_logger(__name__)
router = APIRouter()


def _set_session_cookie(response: Response, issued: IssuedToken, settings: Settings) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        issued.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


@router.post("/login")
def login(
    response: Response,
    payload: Any = Body(default=None),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
    settings: Settings = Depends(get_settings),
):
    """Password login, with a second step when 2FA is enabled.

    Returns ``{"requiresTwoFactor": true}`` (and no session) when the
    password is correct but the TOTP code is still missing.
    """
    result = auth.login(payload, client)
    if result.requires_two_factor:
        return TwoFactorChallenge()

    _set_session_cookie(response, result.session, settings)
    logger.info("login_succeeded", user_id=result.user.id)
    return LoginResponse(user=UserSummary.model_validate(result.user))


@router.post("/register", status_code=201)
def register(
    payload: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    user, issued = auth.register(payload, client)
    _set_session_cookie(response, issued, settings)
    logger.info("user_registered", user_id=user.id)
    return LoginResponse(user=UserSummary.model_validate(user))


@router.post("/logout")
def logout(
    response: Response,
    current: Tuple[UserModel, SessionClaims] = Depends(get_current_session),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    user, claims = current
    auth.logout(user, claims, client)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out successfully")


@router.get("/me")
def me(user: UserModel = Depends(get_current_user)) -> UserProfile:
    return UserProfile.model_validate(user)


@router.get("/csrf")
def csrf_token(response: Response, settings: Settings = Depends(get_settings)) -> CsrfTokenResponse:
    """Issue the double-submit CSRF cookie; clients echo it in ``X-CSRF-Token``."""
    token = secrets.token_urlsafe(32)
    response.set_cookie(
        settings.csrf_cookie_name,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=False,
        samesite="strict",
        secure=settings.is_production,
        path="/",
    )
    return CsrfTokenResponse(csrf_token=token)


# ── password reset ───────────────────────────────────────────────────────

@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
) -> MessageResponse:
    return MessageResponse(message=auth.forgot_password(str(payload.email), client))


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
) -> MessageResponse:
    auth.reset_password(payload, client)
    return MessageResponse(message="Password has been reset. Please sign in again.")


# ── email verification ───────────────────────────────────────────────────

@router.post("/verify-email")
def verify_email(payload: VerifyEmailRequest, auth: AuthService = Depends(get_auth_service)) -> MessageResponse:
    auth.verify_email(payload.token)
    return MessageResponse(message="Email verified successfully")


@router.get("/verify-email")
def verify_email_link(
    token: str = Query(min_length=1),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """Target of the emailed link; lands the browser back on the frontend."""
    base = settings.frontend_url.rstrip("/")
    try:
        auth.verify_email(token)
    except AppError as exc:
        logger.info("email_verification_link_rejected", reason=exc.message)
        return RedirectResponse(f"{base}/auth/verify-email?error=invalid", status_code=303)
    return RedirectResponse(f"{base}/auth/login?verified=true", status_code=303)


@router.post("/resend-verification")
def resend_verification(
    payload: ResendVerificationRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    return MessageResponse(message=auth.resend_verification(str(payload.email)))


# ── two-factor authentication ────────────────────────────────────────────

@router.post("/2fa/setup")
def two_factor_setup(
    user: UserModel = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> TwoFactorSetupResponse:
    secret, uri = auth.setup_two_factor(user)
    return TwoFactorSetupResponse(secret=secret, otpauth_url=uri)


@router.post("/2fa/verify")
def two_factor_verify(
    payload: TwoFactorVerifyRequest,
    user: UserModel = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
) -> MessageResponse:
    enabled = auth.verify_two_factor(user, payload.token, client)
    return MessageResponse(message="2FA enabled successfully" if enabled else "2FA token verified")


@router.post("/2fa/disable")
def two_factor_disable(
    payload: TwoFactorDisableRequest,
    user: UserModel = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth.disable_two_factor(user, payload.password)
    return MessageResponse(message="2FA disabled")
