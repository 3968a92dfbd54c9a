"""Tests for health check endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_basic_health_check(self, client: TestClient):
        """Test /health returns 200."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"]["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_liveness_probe(self, client: TestClient):
        """Test /health/live returns 200."""
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_probe_healthy(self, client: TestClient):
        """Test /health/ready when all services are up."""
        with patch(
            "requestflow.api.routers.health.check_redis",
            return_value={"status": "healthy", "version": "7.2.0"},
        ):
            response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_readiness_probe_redis_down(self, client: TestClient):
        """Test /health/ready returns 503 when the queue is unreachable."""
        with patch(
            "requestflow.api.routers.health.check_redis",
            return_value={"status": "unhealthy", "error": "Connection refused"},
        ):
            response = client.get("/health/ready")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["failed"] == ["redis"]

    def test_degraded_when_database_unreachable(self, client: TestClient):
        with patch(
            "requestflow.api.routers.health.check_database",
            return_value={"status": "unhealthy", "error": "gone"},
        ):
            response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_root(self, client: TestClient):
        data = client.get("/").json()
        assert data["name"] == "RequestFlow"
