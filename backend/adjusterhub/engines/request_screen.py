"""Request screening rules for the security middleware.

``RequestScreen.screen`` inspects an incoming request (method, path, query,
headers) and returns a ``ScreenVerdict`` describing whether it must be
blocked, with which status, and which audit event to record. It performs no
I/O so it can be tested without an ASGI app.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from adjusterhub.schemas.enums import SecurityEventType

HONEYPOT_PATHS: Tuple[str, ...] = (
    "/wp-admin",
    "/wp-login.php",
    "/admin",
    "/administrator",
    "/phpmyadmin",
    "/.env",
    "/config.php",
    "/wp-config.php",
    "/robots.txt",
    "/.git",
    "/backup",
    "/test",
    "/debug",
)

MALICIOUS_USER_AGENTS: Tuple[str, ...] = (
    "sqlmap",
    "nikto",
    "nessus",
    "burpsuite",
    "nmap",
    "masscan",
    "zap",
    "w3af",
)

SUSPICIOUS_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"\.\."),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"union.*select", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:.*base64", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
    re.compile(r"exec\(", re.IGNORECASE),
)

SENSITIVE_PREFIXES: Tuple[str, ...] = (
    "/api/auth/",
    "/api/admin/",
    "/api/users/me",
    "/api/documents",
    "/api/billing",
    "/dashboard/admin",
    "/dashboard/settings",
)

DANGEROUS_HEADERS: Tuple[str, ...] = ("x-forwarded-host", "x-original-url", "x-rewrite-url")

AUTH_PREFIX = "/api/auth/"
AUTH_ALLOWED_METHODS: FrozenSet[str] = frozenset({"GET", "POST", "OPTIONS"})


@dataclass(frozen=True)
class ScreenVerdict:
    blocked: bool
    status_code: int = 200
    error: str = ""
    event_type: Optional[SecurityEventType] = None
    details: Dict[str, str] = field(default_factory=dict)


ALLOW = ScreenVerdict(blocked=False)


def _block(status: int, error: str, event: SecurityEventType, **details: str) -> ScreenVerdict:
    return ScreenVerdict(blocked=True, status_code=status, error=error, event_type=event, details=details)


def is_honeypot(path: str, honeypots: Iterable[str] = HONEYPOT_PATHS) -> bool:
    """Exact match or a sub-path of a honeypot; ``/api/admin`` is not ``/admin``."""
    lowered = path.lower().rstrip("/") or "/"
    return any(lowered == trap or lowered.startswith(trap + "/") for trap in honeypots)


def is_malicious_user_agent(agent: str) -> bool:
    lowered = (agent or "").lower()
    return any(tool in lowered for tool in MALICIOUS_USER_AGENTS)


def find_suspicious_pattern(*values: str) -> Optional[str]:
    for value in values:
        if not value:
            continue
        for pattern in SUSPICIOUS_PATTERNS:
            if pattern.search(value):
                return pattern.pattern
    return None


class RequestScreen:
    """Ordered, data-driven request filter."""

    def __init__(
        self,
        max_request_bytes: int = 50 * 1024 * 1024,
        honeypot_paths: Sequence[str] = HONEYPOT_PATHS,
        sensitive_prefixes: Sequence[str] = SENSITIVE_PREFIXES,
    ):
        self.max_request_bytes = max_request_bytes
        self.honeypot_paths = tuple(honeypot_paths)
        self.sensitive_prefixes = tuple(sensitive_prefixes)

    def is_sensitive(self, path: str) -> bool:
        return path.startswith(self.sensitive_prefixes)

    def screen(self, method: str, path: str, query: str, headers: Mapping[str, str]) -> ScreenVerdict:
        """Evaluate every rule in order; the first match wins.

        ``headers`` must be a case-insensitive mapping (Starlette ``Headers``)
        or use lower-case keys.
        """
        if is_honeypot(path, self.honeypot_paths):
            return _block(404, "Not Found", SecurityEventType.HONEYPOT_TRIGGERED, path=path)

        agent = headers.get("user-agent", "")
        if is_malicious_user_agent(agent):
            return _block(403, "Forbidden", SecurityEventType.SUSPICIOUS_ACTIVITY, action="malicious_user_agent")

        if self.is_sensitive(path):
            url = f"{path}?{query}" if query else path
            pattern = find_suspicious_pattern(url, headers.get("referer", ""), agent)
            if pattern:
                return _block(
                    403, "Forbidden", SecurityEventType.SUSPICIOUS_ACTIVITY,
                    action="suspicious_pattern", pattern=pattern,
                )

        host = headers.get("host", "")
        for name in DANGEROUS_HEADERS:
            value = headers.get(name)
            if value and value != host:
                return _block(
                    403, "Forbidden", SecurityEventType.SUSPICIOUS_ACTIVITY,
                    action="dangerous_header", header=name,
                )

        content_length = headers.get("content-length")
        if content_length:
            try:
                too_large = int(content_length) > self.max_request_bytes
            except ValueError:
                return _block(400, "Invalid Content-Length", SecurityEventType.SUSPICIOUS_ACTIVITY,
                              action="invalid_content_length")
            if too_large:
                return _block(
                    413, "Request Entity Too Large", SecurityEventType.SUSPICIOUS_ACTIVITY,
                    action="request_too_large", size=content_length,
                )

        if path.startswith(AUTH_PREFIX) and method.upper() not in AUTH_ALLOWED_METHODS:
            return _block(
                405, "Method Not Allowed", SecurityEventType.SUSPICIOUS_ACTIVITY,
                action="invalid_method", method=method.upper(),
            )

        return ALLOW
