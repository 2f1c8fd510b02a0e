# tests/api/test_health.py
"""
Tests for the health and version API endpoints.
"""

from clustercost import __version__


class TestHealthEndpoint:
    def test_health_while_initializing(self, client):
        response = client.get("/agent/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "initializing"
        assert data["clusterId"] == "test-cluster"
        assert data["clusterName"] == "Test"
        assert data["clusterRegion"] == "eu-west-1"
        assert data["version"] == __version__
        assert "timestamp" in data

    def test_health_after_first_snapshot(self, client, store, sample_snapshot):
        store.update(sample_snapshot)

        data = client.get("/agent/v1/health").json()

        assert data["status"] == "ok"
        assert data["timestamp"].startswith("2026-02-08T12:00:00")


class TestVersionEndpoint:
    def test_version(self, client):
        response = client.get("/agent/v1/version")

        assert response.status_code == 200
        assert response.json() == {"version": __version__}


def test_openapi_served_under_prefix(client):
    response = client.get("/agent/v1/openapi.json")

    assert response.status_code == 200
    assert "/agent/v1/namespaces" in response.json()["paths"]
