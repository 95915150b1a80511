from unittest.mock import patch

import pytest

from modules.core import views


class TestHealthCheck:
    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "services" in data

    def test_health_check_is_public(self, api_client):
        assert api_client.get("/health").status_code == 200

    @pytest.mark.parametrize("service", ["database", "cache"])
    def test_health_check_reports_service_status(self, client, service):
        data = client.get("/health").json()
        assert data["services"][service]["status"] == "up"
        assert "response_time_ms" in data["services"][service]

    def test_unreachable_cache_reports_unhealthy(self, client):
        def _broken() -> None:
            raise ConnectionError("cache unreachable")

        with patch.dict(views._CHECKS, {"cache": _broken}):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["cache"] == {"status": "down"}
        assert data["services"]["database"]["status"] == "up"
