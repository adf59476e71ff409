"""Tests for health check endpoints.

Verifies the basic, detailed, readiness and liveness checks.
"""

from unittest.mock import patch

from adjusterhub import __version__


class TestBasicHealthCheck:
    def test_health_endpoint_returns_correct_structure(self, client):
        """Health check returns status, service and version."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "adjusterhub", "version": __version__}

    def test_health_is_not_rate_limited(self, client):
        for _ in range(120):
            assert client.get("/health").status_code == 200


class TestDetailedHealthCheck:
    def test_detailed_health_has_checks(self, client):
        data = client.get("/health/detailed").json()
        assert set(data["checks"]) == {"database", "email_api", "claude_api"}
        assert data["environment"] == "test"

    def test_database_check_success(self, client):
        db_check = client.get("/health/detailed").json()["checks"]["database"]
        assert db_check["healthy"] is True
        assert "Database connected" in db_check["message"]

    def test_degraded_without_external_keys(self, client):
        """Test settings carry no email or Anthropic key."""
        data = client.get("/health/detailed").json()
        assert data["status"] == "degraded"
        assert data["checks"]["email_api"]["healthy"] is False
        assert data["checks"]["claude_api"]["message"] == "Anthropic API key not configured"

    @patch("adjusterhub.health.check_assistant_config")
    @patch("adjusterhub.health.check_email_config")
    def test_healthy_when_all_checks_pass(self, mock_email, mock_assistant, client):
        mock_email.return_value = {"healthy": True, "message": "OK"}
        mock_assistant.return_value = {"healthy": True, "message": "OK"}
        assert client.get("/health/detailed").json()["status"] == "healthy"


class TestReadinessAndLiveness:
    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {"ready": True}

    @patch("adjusterhub.health.check_database")
    def test_not_ready_when_db_down(self, mock_check, client):
        mock_check.return_value = {"healthy": False, "message": "Database error: gone"}
        response = client.get("/health/ready")
        assert response.status_code == 503
        assert response.json() == {"ready": False, "reason": "Database unavailable"}

    def test_alive(self, client):
        assert client.get("/health/live").json() == {"alive": True, "status": "healthy"}

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()
        assert data["service"] == "AdjusterHub API"
        assert data["endpoints"]["claims"] == "/api/claims"
