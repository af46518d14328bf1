"""Tests for the root and health endpoints and the request context headers."""

from fastapi.testclient import TestClient

from notion2code import __version__


class TestHealth:

    def test_root(self, client: TestClient):
        body = client.get("/").json()
        assert body == {"name": "notion2code API", "version": __version__, "status": "running"}

    def test_health(self, client: TestClient):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["generation"] == "disabled"
        assert body["notion_fallback_key"] is False
        assert body["uptime_seconds"] >= 0


class TestRequestHeaders:

    def test_generates_request_id_and_timing(self, client: TestClient):
        resp = client.get("/health")

        assert len(resp.headers["X-Request-ID"]) == 16
        assert resp.headers["X-Response-Time"].endswith("ms")

    def test_echoes_caller_request_id(self, client: TestClient):
        resp = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert resp.headers["X-Request-ID"] == "trace-123"

    def test_error_responses_carry_request_id(self, client: TestClient):
        resp = client.get("/api/notion/tree", params={"page_id": "missing"})

        assert resp.status_code == 404
        assert resp.headers["X-Request-ID"]
