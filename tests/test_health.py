"""Tests for /health and / endpoints."""


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["db"] == "ok"
        assert "uptime_seconds" in data
        assert "version" in data
        assert data["folder_count"] == 0
        assert data["file_count"] == 0

    def test_counts_follow_data(self, client):
        folder_id = client.post("/api/projects/p/folders", json={"name": "Data"}).json()["id"]
        client.post(
            f"/api/projects/p/folders/{folder_id}/files",
            files={"file": ("a.txt", b"abc", "text/plain")},
            data={"display_name": "A"},
        )
        data = client.get("/health").json()
        assert data["folder_count"] == 1
        assert data["file_count"] == 1

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "LabShelf API"


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_is_propagated(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"
