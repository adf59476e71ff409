"""Input sanitization, validation patterns, and request metadata helpers."""

import html
import re
from html.parser import HTMLParser
from typing import Iterable, Optional

from starlette.requests import Request

VALIDATION_PATTERNS = {
    "email": re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"),
    "phone": re.compile(r"^\+?[\d\s\-()]{10,}$"),
    "zip_code": re.compile(r"^\d{5}(-\d{4})?$"),
    "claim_number": re.compile(r"^[A-Z]{2,4}-\d{4}-\d{3,6}$"),
    "license_number": re.compile(r"^[A-Z]{2,4}-\d{4,8}$"),
    "filename": re.compile(r"^[a-zA-Z0-9._-]+$"),
}

ALLOWED_TAGS = frozenset({"b", "i", "em", "strong", "p", "br"})
_DROP_CONTENT_TAGS = frozenset({"script", "style", "iframe", "object", "embed"})


class _TagStripper(HTMLParser):
    """Keep text and a small whitelist of attribute-free tags."""

    def __init__(self, allowed: Iterable[str]):
        super().__init__(convert_charrefs=True)
        self.allowed = frozenset(allowed)
        self.parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _DROP_CONTENT_TAGS:
            self._skip_depth += 1
        elif tag in self.allowed and not self._skip_depth:
            self.parts.append(f"<{tag}>")

    def handle_startendtag(self, tag, attrs):
        if tag in self.allowed and not self._skip_depth:
            self.parts.append(f"<{tag}>")

    def handle_endtag(self, tag):
        if tag in _DROP_CONTENT_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in self.allowed and tag != "br" and not self._skip_depth:
            self.parts.append(f"</{tag}>")

    def handle_data(self, data):
        if not self._skip_depth:
            self.parts.append(html.escape(data, quote=False))


def sanitize_input(value: Optional[str], allowed_tags: Iterable[str] = ALLOWED_TAGS) -> str:
    """Strip markup from user input, keeping only a few formatting tags.

    >>> sanitize_input("  <script>alert(1)</script><b>hi</b> ")
    '<b>hi</b>'
    """
    if not value or not isinstance(value, str):
        return ""
    stripper = _TagStripper(allowed_tags)
    stripper.feed(value)
    stripper.close()
    return "".join(stripper.parts).strip()


def sanitize_text(value: Optional[str]) -> str:
    """Plain-text variant: no tags survive."""
    return sanitize_input(value, allowed_tags=())


def matches(pattern_name: str, value: str) -> bool:
    return bool(value) and bool(VALIDATION_PATTERNS[pattern_name].match(value))


def extract_client_ip(request: Request) -> str:
    """Best-effort client address, honouring common proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")


class ClientInfo:
    """Network identity of the caller, carried into audit records."""

    __slots__ = ("ip", "user_agent")

    def __init__(self, ip: str = "unknown", user_agent: str = "unknown"):
        self.ip = ip
        self.user_agent = user_agent

    @classmethod
    def from_request(cls, request: Request) -> "ClientInfo":
        return cls(ip=extract_client_ip(request), user_agent=user_agent(request))

    def __repr__(self) -> str:
        return f"ClientInfo(ip={self.ip!r})"
