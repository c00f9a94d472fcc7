"""
Tests for infrastructure endpoints.

Related files:
    - views.py: health_check
"""

from unittest.mock import patch

import pytest

HEALTH_URL = "/health/"


@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /health/."""

    def test_healthy(self, client):
        response = client.get(HEALTH_URL)

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "database": "connected",
            "channel_layer": "connected",
        }

    def test_no_authentication_required(self, client):
        """
        Load balancers call it without credentials.

        Why it matters: A 401 here would take every instance out of rotation.
        """
        assert client.get(HEALTH_URL).status_code == 200

    def test_channel_layer_missing(self, client):
        with patch("core.views.get_channel_layer", return_value=None):
            response = client.get(HEALTH_URL)

        assert response.status_code == 503
        assert response.json()["channel_layer"] == "unconfigured"
        assert response.json()["status"] == "unhealthy"

    def test_channel_layer_unreachable(self, client):
        class DownLayer:
            async def group_send(self, group, message):
                raise ConnectionError("redis down")

        with patch("core.views.get_channel_layer", return_value=DownLayer()):
            response = client.get(HEALTH_URL)

        assert response.status_code == 503
        assert response.json()["channel_layer"] == "disconnected"
        assert response.json()["database"] == "connected"
