"""Application error taxonomy, classifier, and FastAPI exception handlers.

Every failure the API reports is an ``AppError`` carrying a type, a severity,
an HTTP status and a message that is safe to show to the user. Library
exceptions (pydantic, SQLAlchemy, httpx, OS errors) are mapped onto the
taxonomy by ``classify_error`` so route handlers never build error
responses by hand.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from adjusterhub.logging_config import get_logger

logger = get_logger(__name__)


class ErrorType(str, Enum):
    VALIDATION = "VALIDATION"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMIT = "RATE_LIMIT"
    EXTERNAL_SERVICE = "EXTERNAL_SERVICE"
    DATABASE = "DATABASE"
    FILE_UPLOAD = "FILE_UPLOAD"
    PAYMENT = "PAYMENT"
    INTERNAL = "INTERNAL"


class ErrorSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


DEFAULT_USER_MESSAGES: Dict[ErrorType, str] = {
    ErrorType.VALIDATION: "Please check your input and try again.",
    ErrorType.AUTHENTICATION: "Please log in to continue.",
    ErrorType.AUTHORIZATION: "You do not have permission to perform this action.",
    ErrorType.NOT_FOUND: "The requested resource was not found.",
    ErrorType.CONFLICT: "This action conflicts with existing data.",
    ErrorType.RATE_LIMIT: "Too many requests. Please try again later.",
    ErrorType.EXTERNAL_SERVICE: "An external service is temporarily unavailable. Please try again later.",
    ErrorType.DATABASE: "A database error occurred. Please try again.",
    ErrorType.FILE_UPLOAD: "File upload failed. Please check the file and try again.",
    ErrorType.PAYMENT: "Payment processing failed. Please try again.",
    ErrorType.INTERNAL: "An unexpected error occurred. Please try again.",
}


class AppError(Exception):
    """A classified, user-presentable application failure."""

    def __init__(
        self,
        message: str,
        type: ErrorType = ErrorType.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        status_code: int = 500,
        user_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.type = type
        self.severity = severity
        self.status_code = status_code
        self.user_message = user_message or DEFAULT_USER_MESSAGES[type]
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "type": self.type.value,
            "severity": self.severity.value,
            "status_code": self.status_code,
            "user_message": self.user_message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<AppError {self.type.value} {self.status_code} {self.message!r}>"

    # ── factories ────────────────────────────────────────────────────

    @classmethod
    def validation(cls, message: str, context: Optional[Dict[str, Any]] = None) -> "AppError":
        return cls(message, ErrorType.VALIDATION, ErrorSeverity.LOW, 400, message, context)

    @classmethod
    def authentication(cls, message: str = "Authentication required", context=None) -> "AppError":
        return cls(message, ErrorType.AUTHENTICATION, ErrorSeverity.MEDIUM, 401, message, context)

    @classmethod
    def authorization(cls, message: str = "Insufficient permissions", context=None) -> "AppError":
        return cls(message, ErrorType.AUTHORIZATION, ErrorSeverity.MEDIUM, 403, message, context)

    @classmethod
    def not_found(cls, resource: str = "Resource", context=None) -> "AppError":
        message = f"{resource} not found"
        return cls(message, ErrorType.NOT_FOUND, ErrorSeverity.LOW, 404, message, context)

    @classmethod
    def conflict(cls, message: str, context=None) -> "AppError":
        return cls(message, ErrorType.CONFLICT, ErrorSeverity.MEDIUM, 409, message, context)

    @classmethod
    def rate_limit(cls, message: str = "Too many requests. Please try again later.", context=None) -> "AppError":
        return cls(message, ErrorType.RATE_LIMIT, ErrorSeverity.MEDIUM, 429, message, context)

    @classmethod
    def external_service(cls, service: str, message: str = "", context=None) -> "AppError":
        detail = message or f"{service} request failed"
        return cls(
            detail, ErrorType.EXTERNAL_SERVICE, ErrorSeverity.HIGH, 503,
            context={"service": service, **(context or {})},
        )

    @classmethod
    def database(cls, message: str, context=None) -> "AppError":
        return cls(message, ErrorType.DATABASE, ErrorSeverity.HIGH, 500, context=context)

    @classmethod
    def file_upload(cls, message: str, context=None) -> "AppError":
        return cls(message, ErrorType.FILE_UPLOAD, ErrorSeverity.MEDIUM, 400, message, context)

    @classmethod
    def payment(cls, message: str, context=None) -> "AppError":
        return cls(message, ErrorType.PAYMENT, ErrorSeverity.HIGH, 400, context=context)

    @classmethod
    def internal(cls, message: str, user_message: Optional[str] = None, context=None) -> "AppError":
        return cls(message, ErrorType.INTERNAL, ErrorSeverity.CRITICAL, 500, user_message, context)


# ── classification ───────────────────────────────────────────────────────

_FK_PATTERN = re.compile(r"foreign key", re.IGNORECASE)


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in errors
    ]


def classify_error(exc: BaseException) -> AppError:
    """Map any exception onto the AppError taxonomy."""
    if isinstance(exc, AppError):
        return exc

    if isinstance(exc, ValidationError):
        return AppError.validation(
            "Invalid input data", context={"errors": _validation_details(exc.errors())}
        )

    if isinstance(exc, IntegrityError):
        text = str(exc.orig) if exc.orig is not None else str(exc)
        if _FK_PATTERN.search(text):
            return AppError.conflict(
                "Referenced record does not exist", context={"constraint": "foreign_key"}
            )
        return AppError.conflict("A record with this value already exists", context={"constraint": "unique"})

    if isinstance(exc, NoResultFound):
        return AppError.not_found("Record")

    if isinstance(exc, SQLAlchemyError):
        return AppError.database(f"Database operation failed: {exc.__class__.__name__}")

    if isinstance(exc, httpx.HTTPError):
        return AppError.external_service("http", str(exc))

    message = str(exc)
    lowered = message.lower()
    if "network" in lowered or "fetch" in lowered:
        return AppError.external_service("network", message)
    if isinstance(exc, OSError) or "file" in lowered:
        return AppError.file_upload(message or "File operation failed")

    return AppError.internal(message or exc.__class__.__name__)


def log_error(error: AppError, **request_context: Any) -> None:
    """Log an AppError at a level chosen by its severity."""
    fields = {
        "error_type": error.type.value,
        "severity": error.severity.value,
        "status_code": error.status_code,
        "error_message": error.message,
        "context": error.context,
        **request_context,
    }
    if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.HIGH):
        logger.error("app_error", **fields)
    elif error.severity is ErrorSeverity.MEDIUM:
        logger.warning("app_error", **fields)
    else:
        logger.info("app_error", **fields)


# ── FastAPI integration ──────────────────────────────────────────────────

def error_body(error: AppError, include_details: bool = False) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error.user_message, "type": error.type.value}
    if error.type is ErrorType.VALIDATION and "errors" in error.context:
        body["details"] = error.context["errors"]
    elif error.type is ErrorType.CONFLICT and "conflicts" in error.context:
        body["conflicts"] = error.context["conflicts"]
    elif include_details and error.context:
        body["details"] = error.context
    return body


def register_exception_handlers(app: FastAPI, settings_getter: Callable[[], Any]) -> None:
    """Install handlers that render every failure as ``{"error", "type"}`` JSON.

    ``settings_getter`` is resolved per request so tests can swap settings
    after the app module is imported.
    """

    def _respond(request: Request, error: AppError) -> JSONResponse:
        settings = settings_getter()
        log_error(error, path=request.url.path, method=request.method)
        show_details = settings.debug or settings.environment == "development"
        response = JSONResponse(status_code=error.status_code, content=error_body(error, show_details))
        if error.type is ErrorType.AUTHENTICATION and request.cookies.get(settings.session_cookie_name):
            response.delete_cookie(settings.session_cookie_name, path="/")
        if error.type is ErrorType.RATE_LIMIT and "retry_after" in error.context:
            response.headers["Retry-After"] = str(error.context["retry_after"])
        return response

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return _respond(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = AppError.validation(
            "Invalid input data", context={"errors": _validation_details(list(exc.errors()))}
        )
        return _respond(request, error)

    @app.exception_handler(ValidationError)
    async def handle_pydantic_validation(request: Request, exc: ValidationError):
        return _respond(request, classify_error(exc))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        return _respond(request, classify_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("unhandled_exception", path=request.url.path)
        return _respond(request, classify_error(exc))
