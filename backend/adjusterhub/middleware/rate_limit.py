"""Per-IP rate limiting for the JSON API."""

from typing import Optional, Sequence, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from adjusterhub.dependencies import get_container
from adjusterhub.logging_config import get_logger
from adjusterhub.schemas.enums import SecurityEventType
from adjusterhub.security.sanitize import ClientInfo

logger = get_logger(__name__)

# First matching prefix group wins.
ROUTE_RULES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("/api/auth/login", "/api/auth/register"), "auth"),
    (("/api/auth/forgot-password", "/api/auth/reset-password"), "password"),
    (("/api/documents/upload",), "upload"),
    (("/api/messages",), "messages"),
    (("/api/",), "api"),
)


def match_rule(path: str) -> Optional[str]:
    for prefixes, rule_name in ROUTE_RULES:
        if path.startswith(prefixes):
            return rule_name
    return None


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rule_name = match_rule(request.url.path)
        if rule_name is None or request.method == "OPTIONS":
            return await call_next(request)

        container = get_container()
        limiter = container.rate_limiters()[rule_name]
        client = ClientInfo.from_request(request)
        key = f"{rule_name}:{client.ip}"

        decision = limiter.acquire(key)
        if not decision.allowed:
            await run_in_threadpool(
                container.audit_log().record,
                SecurityEventType.RATE_LIMIT_EXCEEDED,
                client.ip,
                client.user_agent,
                rule=rule_name,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=429,
                content={"error": limiter.rule.message, "retryAfter": decision.retry_after},
                headers=decision.headers(),
            )

        response = await call_next(request)
        limiter.settle(key, succeeded=response.status_code < 400)
        for name, value in decision.headers().items():
            response.headers[name] = value
        return response
