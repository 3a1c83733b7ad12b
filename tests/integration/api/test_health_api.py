"""
Integration tests for health, readiness and metrics endpoints.
"""

import pytest
from django.urls import reverse


@pytest.mark.django_db
@pytest.mark.integration
class TestHealthEndpoints:
    """Integration tests for operational endpoints."""

    def test_health(self, client):
        response = client.get(reverse("health"))

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "device-license-service"}

    def test_health_db(self, client):
        response = client.get(reverse("health-db"))

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_health_cache(self, client):
        response = client.get(reverse("health-cache"))

        assert response.json()["cache"] == "connected"

    def test_ready(self, client):
        response = client.get(reverse("ready"))

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "checks": {"database": True, "cache": True}}

    def test_metrics(self, client, api_client):
        api_client.post(
            reverse("keys:validate"),
            {"licenseKey": "NOPE", "deviceId": "d", "machineId": "m"},
            format="json",
        )

        response = client.get(reverse("metrics"))

        assert response.status_code == 200
        assert response["Content-Type"].startswith("text/plain")
        assert b"http_requests_total" in response.content

    def test_trace_id_header(self, api_client):
        response = api_client.post(reverse("keys:activate"), {}, format="json")

        assert response.status_code == 400
        assert response["X-Trace-ID"]
