"""Edge security: request screening, CSRF double-submit check, security headers.

Blocked requests are answered here with ``{"error": ...}`` and an audit
event; everything else passes through and gets the security headers on the
way out.
"""

import secrets
from typing import Dict, List, Mapping

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from adjusterhub.config import Settings
from adjusterhub.dependencies import get_container
from adjusterhub.engines.request_screen import ALLOW, ScreenVerdict
from adjusterhub.logging_config import get_logger
from adjusterhub.schemas.enums import SecurityEventType
from adjusterhub.security.sanitize import ClientInfo

logger = get_logger(__name__)

CSP_DIRECTIVES: Dict[str, List[str]] = {
    "default-src": ["'self'"],
    "script-src": ["'self'", "'unsafe-inline'"],
    "style-src": ["'self'", "'unsafe-inline'", "https://fonts.googleapis.com"],
    "font-src": ["'self'", "https://fonts.gstatic.com"],
    "img-src": ["'self'", "data:", "blob:"],
    "connect-src": ["'self'", "https://api.resend.com", "https://api.anthropic.com"],
    "object-src": ["'none'"],
    "base-uri": ["'self'"],
    "form-action": ["'self'"],
    "frame-ancestors": ["'none'"],
    "upgrade-insecure-requests": [],
}


def generate_csp(directives: Mapping[str, List[str]] = CSP_DIRECTIVES) -> str:
    return "; ".join(f"{name} {' '.join(sources)}".strip() for name, sources in directives.items())


SECURITY_HEADERS: Dict[str, str] = {
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": generate_csp(),
}

CSRF_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
CSRF_EXEMPT_PREFIXES = ("/api/auth/", "/api/webhooks/")
CSRF_HEADER = "x-csrf-token"


def check_csrf(
    method: str,
    path: str,
    headers: Mapping[str, str],
    cookies: Mapping[str, str],
    settings: Settings,
) -> ScreenVerdict:
    """Double-submit check for cookie-authenticated, state-changing requests."""
    if not settings.csrf_protection_enabled or method.upper() not in CSRF_METHODS:
        return ALLOW
    if path.startswith(CSRF_EXEMPT_PREFIXES):
        return ALLOW
    if headers.get("authorization", "").lower().startswith("bearer "):
        return ALLOW
    if not cookies.get(settings.session_cookie_name):
        return ALLOW

    sent = headers.get(CSRF_HEADER, "")
    expected = cookies.get(settings.csrf_cookie_name, "")
    if sent and expected and secrets.compare_digest(sent, expected):
        return ALLOW
    return ScreenVerdict(
        blocked=True,
        status_code=403,
        error="Invalid CSRF token",
        event_type=SecurityEventType.SUSPICIOUS_ACTIVITY,
        details={"action": "csrf_validation_failed"},
    )


def apply_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


class SecurityMiddleware(BaseHTTPMiddleware):
    """Screens every request before routing and hardens every response."""

    async def dispatch(self, request: Request, call_next):
        container = get_container()
        path = request.url.path
        try:
            verdict = container.request_screen().screen(
                request.method, path, request.url.query, request.headers
            )
            if not verdict.blocked:
                verdict = check_csrf(
                    request.method, path, request.headers, request.cookies, container.settings()
                )
        except Exception:
            # screening must never take the API down
            logger.exception("security_screen_failed", path=path)
            verdict = ALLOW

        if verdict.blocked:
            client = ClientInfo.from_request(request)
            details = {"path": path, "method": request.method, **verdict.details}
            await run_in_threadpool(
                container.audit_log().record, verdict.event_type, client.ip, client.user_agent, **details
            )
            logger.warning("request_blocked", status_code=verdict.status_code, **details)
            return apply_security_headers(
                JSONResponse(status_code=verdict.status_code, content={"error": verdict.error})
            )

        response = await call_next(request)
        return apply_security_headers(response)
