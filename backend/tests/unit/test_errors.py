"""Tests for the AppError taxonomy and exception classification."""

import httpx
import pytest
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from adjusterhub.errors import AppError, ErrorSeverity, ErrorType, classify_error, error_body


class _Payload(BaseModel):
    email: str
    age: int


def _validation_error() -> ValidationError:
    with pytest.raises(ValidationError) as info:
        _Payload.model_validate({"email": "a@example.com", "age": "old"})
    return info.value


class TestFactories:
    @pytest.mark.parametrize(
        "error, error_type, status, severity",
        [
            (AppError.validation("bad"), ErrorType.VALIDATION, 400, ErrorSeverity.LOW),
            (AppError.authentication(), ErrorType.AUTHENTICATION, 401, ErrorSeverity.MEDIUM),
            (AppError.authorization(), ErrorType.AUTHORIZATION, 403, ErrorSeverity.MEDIUM),
            (AppError.not_found("Claim"), ErrorType.NOT_FOUND, 404, ErrorSeverity.LOW),
            (AppError.conflict("dup"), ErrorType.CONFLICT, 409, ErrorSeverity.MEDIUM),
            (AppError.rate_limit(), ErrorType.RATE_LIMIT, 429, ErrorSeverity.MEDIUM),
            (AppError.external_service("email"), ErrorType.EXTERNAL_SERVICE, 503, ErrorSeverity.HIGH),
            (AppError.database("boom"), ErrorType.DATABASE, 500, ErrorSeverity.HIGH),
            (AppError.file_upload("too big"), ErrorType.FILE_UPLOAD, 400, ErrorSeverity.MEDIUM),
            (AppError.payment("declined"), ErrorType.PAYMENT, 400, ErrorSeverity.HIGH),
            (AppError.internal("oops"), ErrorType.INTERNAL, 500, ErrorSeverity.CRITICAL),
        ],
    )
    def test_factory_defaults(self, error, error_type, status, severity):
        assert error.type is error_type
        assert error.status_code == status
        assert error.severity is severity
        assert error.user_message

    def test_not_found_message(self):
        error = AppError.not_found("Claim")
        assert error.message == "Claim not found"
        assert error.user_message == "Claim not found"

    def test_internal_hides_details_by_default(self):
        error = AppError.internal("KeyError: 'secret'")
        assert error.user_message == "An unexpected error occurred. Please try again."

    def test_external_service_context(self):
        error = AppError.external_service("email", context={"status": 502})
        assert error.context == {"service": "email", "status": 502}
        assert error.message == "email request failed"

    def test_to_dict(self):
        data = AppError.conflict("User already exists").to_dict()
        assert data["type"] == "CONFLICT"
        assert data["status_code"] == 409
        assert data["user_message"] == "User already exists"
        assert "timestamp" in data


class TestClassifyError:
    def test_app_error_passes_through(self):
        error = AppError.validation("bad")
        assert classify_error(error) is error

    def test_pydantic_validation(self):
        error = classify_error(_validation_error())
        assert error.type is ErrorType.VALIDATION
        assert error.context["errors"][0]["loc"] == ["age"]

    def test_unique_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        error = classify_error(exc)
        assert error.type is ErrorType.CONFLICT
        assert error.context == {"constraint": "unique"}

    def test_foreign_key_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        assert classify_error(exc).context == {"constraint": "foreign_key"}

    def test_no_result(self):
        assert classify_error(NoResultFound()).type is ErrorType.NOT_FOUND

    def test_other_database_error(self):
        exc = OperationalError("SELECT", {}, Exception("database is locked"))
        assert classify_error(exc).type is ErrorType.DATABASE

    def test_httpx_error(self):
        assert classify_error(httpx.ConnectError("refused")).type is ErrorType.EXTERNAL_SERVICE

    def test_network_message(self):
        assert classify_error(RuntimeError("network unreachable")).type is ErrorType.EXTERNAL_SERVICE

    def test_os_error(self):
        assert classify_error(PermissionError("denied")).type is ErrorType.FILE_UPLOAD

    def test_anything_else_is_internal(self):
        error = classify_error(ZeroDivisionError("division by zero"))
        assert error.type is ErrorType.INTERNAL
        assert error.severity is ErrorSeverity.CRITICAL


class TestErrorBody:
    def test_minimal_body(self):
        body = error_body(AppError.authentication("Invalid credentials"))
        assert body == {"error": "Invalid credentials", "type": "AUTHENTICATION"}

    def test_validation_details_always_included(self):
        error = AppError.validation("Invalid input data", context={"errors": [{"loc": ["email"]}]})
        assert error_body(error)["details"] == [{"loc": ["email"]}]

    def test_context_only_in_debug(self):
        error = AppError.conflict("dup", context={"constraint": "unique"})
        assert "details" not in error_body(error)
        assert error_body(error, include_details=True)["details"] == {"constraint": "unique"}

    def test_conflicting_records_always_included(self):
        error = AppError.conflict("Time conflict detected", context={"conflicts": [{"id": 3}]})
        assert error_body(error) == {
            "error": "Time conflict detected",
            "type": "CONFLICT",
            "conflicts": [{"id": 3}],
        }
