"""Tests for edge request screening rules."""

import pytest

from adjusterhub.engines.request_screen import (
    RequestScreen,
    find_suspicious_pattern,
    is_honeypot,
    is_malicious_user_agent,
)
from adjusterhub.schemas.enums import SecurityEventType

BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64)"


def _headers(**extra):
    headers = {"user-agent": BROWSER_UA, "host": "api.example.com"}
    headers.update({k.replace("_", "-"): v for k, v in extra.items()})
    return headers


@pytest.fixture()
def screen():
    return RequestScreen(max_request_bytes=1024)


class TestHoneypots:
    @pytest.mark.parametrize("path", ["/wp-admin", "/.env", "/phpmyadmin/index.php", "/admin/", "/.git/config"])
    def test_honeypot_paths(self, path):
        assert is_honeypot(path)

    @pytest.mark.parametrize("path", ["/api/admin/users", "/administration", "/api/claims", "/"])
    def test_regular_paths(self, path):
        assert not is_honeypot(path)

    def test_screen_returns_404(self, screen):
        verdict = screen.screen("GET", "/wp-login.php", "", _headers())
        assert verdict.blocked
        assert verdict.status_code == 404
        assert verdict.event_type == SecurityEventType.HONEYPOT_TRIGGERED


class TestUserAgents:
    def test_scanner_agents_are_blocked(self, screen):
        assert is_malicious_user_agent("sqlmap/1.7.2#stable")
        verdict = screen.screen("GET", "/api/claims", "", _headers(user_agent="Nikto/2.5"))
        assert verdict.blocked
        assert verdict.status_code == 403
        assert verdict.details["action"] == "malicious_user_agent"

    def test_browser_allowed(self, screen):
        assert not screen.screen("GET", "/api/claims", "", _headers()).blocked


class TestSuspiciousPatterns:
    def test_pattern_in_sensitive_query_is_blocked(self, screen):
        verdict = screen.screen("GET", "/api/documents", "search=<script>alert(1)</script>", _headers())
        assert verdict.blocked
        assert verdict.details["action"] == "suspicious_pattern"

    def test_union_select(self):
        assert find_suspicious_pattern("/api/admin/users?q=1 UNION ALL SELECT password") is not None

    def test_non_sensitive_path_is_not_pattern_checked(self, screen):
        assert not screen.screen("GET", "/api/claims", "search=..%2F", _headers()).blocked


class TestHeadersAndSize:
    def test_dangerous_header_differs_from_host(self, screen):
        verdict = screen.screen("GET", "/api/claims", "", _headers(x_forwarded_host="evil.example.net"))
        assert verdict.blocked
        assert verdict.details["header"] == "x-forwarded-host"

    def test_dangerous_header_equal_to_host_is_allowed(self, screen):
        assert not screen.screen("GET", "/api/claims", "", _headers(x_forwarded_host="api.example.com")).blocked

    def test_oversized_body(self, screen):
        verdict = screen.screen("POST", "/api/claims", "", _headers(content_length="2048"))
        assert verdict.status_code == 413

    def test_invalid_content_length(self, screen):
        verdict = screen.screen("POST", "/api/claims", "", _headers(content_length="lots"))
        assert verdict.status_code == 400


class TestAuthMethods:
    @pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
    def test_auth_rejects_other_methods(self, screen, method):
        verdict = screen.screen(method, "/api/auth/login", "", _headers())
        assert verdict.status_code == 405

    @pytest.mark.parametrize("method", ["GET", "POST", "OPTIONS"])
    def test_auth_allows_get_post_options(self, screen, method):
        assert not screen.screen(method, "/api/auth/login", "", _headers()).blocked
