"""API tests for the edge middleware: request screening, headers and audit events."""

from adjusterhub.models.security_event import SecurityEventModel
from adjusterhub.schemas.enums import Role, SecurityEventType


def _event_types(db):
    db.expire_all()
    return [e.type for e in db.query(SecurityEventModel).all()]


class TestRequestScreening:
    def test_honeypot_path_returns_404_and_is_audited(self, client, db):
        resp = client.get("/wp-admin/setup.php")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not Found"}
        assert SecurityEventType.HONEYPOT_TRIGGERED.value in _event_types(db)

    def test_scanner_user_agent_forbidden(self, client, db):
        resp = client.get("/api/claims", headers={"User-Agent": "sqlmap/1.7"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}
        assert SecurityEventType.SUSPICIOUS_ACTIVITY.value in _event_types(db)

    def test_suspicious_query_on_sensitive_path(self, client):
        resp = client.get("/api/documents", params={"search": "1 union select password"})
        assert resp.status_code == 403

    def test_same_query_elsewhere_reaches_the_route(self, client):
        resp = client.get("/api/claims", params={"search": "1 union select password"})
        assert resp.status_code == 401

    def test_disallowed_auth_method(self, client):
        resp = client.put("/api/auth/login", json={})
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method Not Allowed"}

    def test_dangerous_forwarding_header(self, client):
        resp = client.get("/api/claims", headers={"X-Original-URL": "/api/admin/users"})
        assert resp.status_code == 403


class TestResponseHardening:
    def test_security_headers_on_normal_responses(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert "default-src 'self'" in resp.headers["Content-Security-Policy"]

    def test_security_headers_on_blocked_responses(self, client):
        resp = client.get("/.env")
        assert resp.status_code == 404
        assert resp.headers["Strict-Transport-Security"].startswith("max-age=")

    def test_request_id_round_trip(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_rate_limit_headers_on_api_routes(self, client, make_user, auth_headers):
        resp = client.get("/api/auth/me", headers=auth_headers(make_user()))
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Limit"] == "100"


class TestErrorShape:
    def test_unknown_route(self, client):
        resp = client.get("/api/nowhere")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_forbidden_role(self, client, make_user, auth_headers):
        headers = auth_headers(make_user(role=Role.ADJUSTER))
        resp = client.get("/api/admin/users", headers=headers)
        assert resp.status_code == 403
        assert resp.json() == {"error": "Insufficient permissions", "type": "AUTHORIZATION"}
