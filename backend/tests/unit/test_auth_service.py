"""Unit tests for AuthService: login, registration, sessions, password reset and 2FA."""

from unittest.mock import MagicMock

import pyotp
import pytest

import adjusterhub.dependencies as deps
from adjusterhub.errors import AppError, ErrorType
from adjusterhub.models.notification import NotificationModel
from adjusterhub.models.security_event import SecurityEventModel
from adjusterhub.models.session import SessionModel
from adjusterhub.schemas.auth import RegisterRequest, ResetPasswordRequest
from adjusterhub.schemas.enums import Role, SecurityEventType
from adjusterhub.security.sanitize import ClientInfo
from tests.fixtures import TEST_PASSWORD

CLIENT = ClientInfo(ip="10.0.0.1", user_agent="pytest")


@pytest.fixture()
def service(container, db):
    svc = deps.get_auth_service(db=db, notifications=deps.get_notification_service(db))
    svc.email = MagicMock()
    return svc


def _events(db, event_type):
    db.expire_all()
    return db.query(SecurityEventModel).filter(SecurityEventModel.type == event_type.value).all()


class TestLogin:
    def test_valid_credentials_open_session(self, service, make_user, db):
        user = make_user(email="adj@example.com")
        result = service.login({"email": "ADJ@example.com", "password": TEST_PASSWORD}, CLIENT)

        assert result.requires_two_factor is False
        assert result.user.id == user.id
        assert result.session.token
        assert db.query(SessionModel).filter_by(user_id=user.id).count() == 1
        assert len(_events(db, SecurityEventType.AUTH_SUCCESS)) == 1

    def test_unknown_email_is_generic_failure(self, service, db):
        with pytest.raises(AppError) as exc_info:
            service.login({"email": "nobody@example.com", "password": TEST_PASSWORD}, CLIENT)
        assert exc_info.value.status_code == 401
        assert exc_info.value.user_message == "Invalid credentials"
        assert len(_events(db, SecurityEventType.AUTH_FAILURE)) == 1

    def test_wrong_password_is_generic_failure(self, service, make_user):
        user = make_user()
        with pytest.raises(AppError) as exc_info:
            service.login({"email": user.email, "password": "Wr0ng!Password"}, CLIENT)
        assert exc_info.value.user_message == "Invalid credentials"

    def test_deactivated_account(self, service, make_user):
        user = make_user(is_active=False)
        with pytest.raises(AppError) as exc_info:
            service.login({"email": user.email, "password": TEST_PASSWORD}, CLIENT)
        assert exc_info.value.user_message == "Account is deactivated"

    def test_malformed_payload_is_validation_error(self, service, db):
        with pytest.raises(AppError) as exc_info:
            service.login({"email": "not-an-email"}, CLIENT)
        assert exc_info.value.type == ErrorType.VALIDATION
        assert len(_events(db, SecurityEventType.AUTH_ATTEMPT)) == 1

    def test_two_factor_challenge_then_code(self, service, make_user):
        secret = pyotp.random_base32()
        user = make_user(two_factor_enabled=True, two_factor_secret=secret)

        challenge = service.login({"email": user.email, "password": TEST_PASSWORD}, CLIENT)
        assert challenge.requires_two_factor is True
        assert challenge.session is None

        with pytest.raises(AppError) as exc_info:
            service.login({"email": user.email, "password": TEST_PASSWORD, "twoFactorToken": "000000"}, CLIENT)
        assert exc_info.value.user_message == "Invalid two-factor authentication code"

        code = pyotp.TOTP(secret).now()
        result = service.login({"email": user.email, "password": TEST_PASSWORD, "twoFactorToken": code}, CLIENT)
        assert result.session is not None


class TestSessions:
    def test_authenticate_and_logout(self, service, make_user):
        user = make_user()
        result = service.login({"email": user.email, "password": TEST_PASSWORD}, CLIENT)

        resolved, claims = service.authenticate(result.session.token)
        assert resolved.id == user.id
        assert claims.role == Role.ADJUSTER.value

        service.logout(resolved, claims, CLIENT)
        with pytest.raises(AppError) as exc_info:
            service.authenticate(result.session.token)
        assert exc_info.value.user_message == "Invalid session"

    def test_garbage_token_rejected(self, service):
        with pytest.raises(AppError):
            service.authenticate("not-a-jwt")

    def test_deactivated_user_session_rejected(self, service, make_user, db):
        user = make_user()
        result = service.login({"email": user.email, "password": TEST_PASSWORD}, CLIENT)
        user.is_active = False
        db.commit()
        with pytest.raises(AppError):
            service.authenticate(result.session.token)


class TestRegistration:
    def _request(self, **overrides):
        data = {
            "email": "New.Adjuster@Example.com",
            "password": TEST_PASSWORD,
            "firstName": "Nia",
            "lastName": "<b>Reyes</b>",
            "specialties": ["Hail"],
        }
        data.update(overrides)
        return RegisterRequest.model_validate(data)

    def test_register_creates_adjuster_and_session(self, service, db):
        user, issued = service.register(self._request(), CLIENT)

        assert user.email == "new.adjuster@example.com"
        assert user.role == Role.ADJUSTER.value
        assert user.last_name == "Reyes"
        assert user.email_verified is False
        assert issued.token
        assert db.query(NotificationModel).filter_by(user_id=user.id).count() == 1
        service.email.send_verification_email.assert_called_once()

    def test_duplicate_email_conflict(self, service, make_user):
        make_user(email="new.adjuster@example.com")
        with pytest.raises(AppError) as exc_info:
            service.register(self._request(), CLIENT)
        assert exc_info.value.status_code == 409

    def test_weak_password_rejected(self, service):
        with pytest.raises(AppError) as exc_info:
            service.register(self._request(password="password"), CLIENT)
        assert exc_info.value.status_code == 400
        assert exc_info.value.context["errors"]

    def test_verify_email_with_issued_token(self, service):
        user, _ = service.register(self._request(), CLIENT)
        raw_token = service.email.send_verification_email.call_args.args[2]

        verified = service.verify_email(raw_token)
        assert verified.id == user.id
        assert verified.email_verified is True
        service.email.send_welcome_email.assert_called_once_with(user.email, user.first_name)

        with pytest.raises(AppError):
            service.verify_email(raw_token)


class TestPasswordReset:
    def test_forgot_password_same_reply_for_unknown_email(self, service, make_user):
        user = make_user()
        known = service.forgot_password(user.email, CLIENT)
        unknown = service.forgot_password("ghost@example.com", CLIENT)
        assert known == unknown
        service.email.send_password_reset_email.assert_called_once()

    def test_reset_changes_password_and_revokes_sessions(self, service, make_user, db):
        user = make_user()
        service.login({"email": user.email, "password": TEST_PASSWORD}, CLIENT)
        service.forgot_password(user.email, CLIENT)
        raw_token = service.email.send_password_reset_email.call_args.args[2]

        new_password = "N3w!Password99"
        service.reset_password(
            ResetPasswordRequest(token=raw_token, password=new_password, confirm_password=new_password), CLIENT
        )

        assert db.query(SessionModel).filter_by(user_id=user.id).count() == 0
        assert service.login({"email": user.email, "password": new_password}, CLIENT).session
        with pytest.raises(AppError):
            service.reset_password(
                ResetPasswordRequest(token=raw_token, password=new_password, confirm_password=new_password), CLIENT
            )


class TestTwoFactorEnrolment:
    def test_setup_verify_disable(self, service, make_user):
        user = make_user()
        secret, uri = service.setup_two_factor(user)
        assert uri.startswith("otpauth://totp/")

        with pytest.raises(AppError) as exc_info:
            service.verify_two_factor(user, "123456" if pyotp.TOTP(secret).now() != "123456" else "654321", CLIENT)
        assert exc_info.value.user_message == "Invalid 2FA token"

        assert service.verify_two_factor(user, pyotp.TOTP(secret).now(), CLIENT) is True
        assert user.two_factor_enabled is True

        with pytest.raises(AppError) as exc_info:
            service.setup_two_factor(user)
        assert exc_info.value.user_message == "2FA is already enabled"

        with pytest.raises(AppError):
            service.disable_two_factor(user, "Wr0ng!Password")
        service.disable_two_factor(user, TEST_PASSWORD)
        assert user.two_factor_enabled is False
        assert user.two_factor_secret is None

    def test_verify_without_setup(self, service, make_user):
        with pytest.raises(AppError) as exc_info:
            service.verify_two_factor(make_user(), "123456", CLIENT)
        assert exc_info.value.user_message == "2FA setup has not been started"

    def test_verify_attempts_are_rate_limited(self, service, make_user):
        user = make_user()
        service.setup_two_factor(user)
        limit = service.two_factor_limiter.rule.max_requests
        for _ in range(limit):
            with pytest.raises(AppError):
                service.verify_two_factor(user, "abcdef", CLIENT)
        with pytest.raises(AppError) as exc_info:
            service.verify_two_factor(user, "abcdef", CLIENT)
        assert exc_info.value.status_code == 429
