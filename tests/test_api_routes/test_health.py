"""
Tests for health, metrics and root routes.
"""
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from taskorbit.app import create_app
from taskorbit.storage.interface import StorageError


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


class TestHealthCheck:
    """Test GET /health endpoint."""

    def test_health_check_healthy(self, client, services):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "taskorbit"
        assert data["components"]["database"]["type"] == services.storage.backend_name
        assert data["components"]["database"]["connectivity"] == "connected"

    def test_health_check_unhealthy(self, client, services):
        with patch.object(services.storage, "ping", side_effect=StorageError("unreachable")):
            response = client.get("/health")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["components"]["database"]["error"] == "unreachable"

    def test_database_health(self, client):
        response = client.get("/health/database")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_database_health_unhealthy(self, client, services):
        with patch.object(services.storage, "ping", side_effect=StorageError("unreachable")):
            response = client.get("/health/database")
        assert response.status_code == 503


class TestMetrics:

    def test_metrics_exposed(self, client):
        client.get("/health")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    def test_request_id_is_propagated(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"


class TestRootAndFallbacks:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["data"]["service"] == "TaskOrbit"

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_unhandled_error_includes_stack_outside_production(self, services):
        app = create_app(services)
        services.task_service.get_task_stats = Mock(side_effect=RuntimeError("kaboom"))
        client = TestClient(app, raise_server_exceptions=False)
        headers = _auth_headers(client)

        response = client.get("/tasks/stats", headers=headers)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert "kaboom" in body["stack"]

    def test_unhandled_error_hides_stack_in_production(self, services):
        services.settings.environment = "production"
        app = create_app(services)
        services.task_service.get_task_stats = Mock(side_effect=RuntimeError("kaboom"))
        client = TestClient(app, raise_server_exceptions=False)
        headers = _auth_headers(client)

        response = client.get("/tasks/stats", headers=headers)

        assert response.status_code == 500
        assert "stack" not in response.json()


def _auth_headers(client):
    token = client.post(
        "/auth/register", json={"email": "ops@example.com", "password": "secret1", "name": "Ops"}
    ).json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}
