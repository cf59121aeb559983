import time

from fastapi.testclient import TestClient


def wait_for_clicks(client: TestClient, short_code: str, expected: int, timeout: float = 2.0) -> int:
    """Poll the info endpoint until the background click count catches up."""
    deadline = time.monotonic() + timeout
    clicks = client.get(f"/api/info/{short_code}").json()["clicks"]
    while clicks < expected and time.monotonic() < deadline:
        time.sleep(0.01)
        clicks = client.get(f"/api/info/{short_code}").json()["clicks"]
    return clicks


class TestShortenEndpoint:
    """Test POST /api/shorten"""

    def test_create_short_link(self, client: TestClient, test_settings):
        """Test creating a short link"""
        response = client.post("/api/shorten", json={"url": "https://example.com/page"})
        assert response.status_code == 201

        data = response.json()
        assert len(data["short_code"]) == 6
        assert data["original_url"] == "https://example.com/page"
        assert data["short_url"] == f"{test_settings.base_url}/{data['short_code']}"

    def test_wrong_scheme_rejected(self, client: TestClient):
        response = client.post("/api/shorten", json={"url": "ftp://x"})
        assert response.status_code == 400
        assert "http://" in response.json()["detail"]

    def test_too_short_url_rejected(self, client: TestClient):
        response = client.post("/api/shorten", json={"url": "http://a"})
        assert response.status_code == 400

    def test_missing_url_field(self, client: TestClient):
        response = client.post("/api/shorten", json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request: URL is required"

    def test_rejected_url_is_not_listed(self, client: TestClient):
        client.post("/api/shorten", json={"url": "not-a-valid-url"})
        assert client.get("/api/links").json() == []


class TestRedirectEndpoint:
    """Test GET /{short_code}"""

    def test_redirect(self, client: TestClient):
        """Test redirect to the original URL"""
        code = client.post("/api/shorten", json={"url": "https://www.github.com/"}).json()["short_code"]

        response = client.get(f"/{code}", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://www.github.com/"

    def test_redirect_counts_click(self, client: TestClient):
        """Clicks go from 0 to 1 once the dispatcher has run"""
        code = client.post("/api/shorten", json={"url": "https://example.com/page"}).json()["short_code"]
        assert client.get(f"/api/info/{code}").json()["clicks"] == 0

        client.get(f"/{code}", follow_redirects=False)

        assert wait_for_clicks(client, code, expected=1) == 1

    def test_redirect_nonexistent(self, client: TestClient):
        response = client.get("/nosuch", follow_redirects=False)
        assert response.status_code == 404

    def test_reserved_paths(self, client: TestClient):
        for path in ("favicon.ico", "api"):
            response = client.get(f"/{path}", follow_redirects=False)
            assert response.status_code == 404


class TestInfoAndListEndpoints:
    """Test GET /api/info/{code} and GET /api/links"""

    def test_info(self, client: TestClient):
        code = client.post("/api/shorten", json={"url": "https://www.python.org"}).json()["short_code"]

        response = client.get(f"/api/info/{code}")
        assert response.status_code == 200

        data = response.json()
        assert data["short_code"] == code
        assert data["original_url"] == "https://www.python.org"
        assert data["clicks"] == 0
        assert data["created_at"].endswith("+00:00")

    def test_info_is_stable(self, client: TestClient):
        code = client.post("/api/shorten", json={"url": "https://www.python.org"}).json()["short_code"]

        first = client.get(f"/api/info/{code}").json()
        client.get(f"/{code}", follow_redirects=False)
        second = client.get(f"/api/info/{code}").json()

        assert first["original_url"] == second["original_url"]
        assert first["created_at"] == second["created_at"]
        assert second["clicks"] >= first["clicks"]

    def test_info_nonexistent(self, client: TestClient):
        response = client.get("/api/info/nosuch")
        assert response.status_code == 404
        assert response.json()["detail"] == "Short link not found"

    def test_list_empty(self, client: TestClient):
        response = client.get("/api/links")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_after_delete(self, client: TestClient):
        codes = [
            client.post("/api/shorten", json={"url": f"https://example.com/{name}"}).json()["short_code"]
            for name in ("a", "b", "c")
        ]
        client.delete(f"/api/links/{codes[1]}")

        listed = {item["short_code"] for item in client.get("/api/links").json()}
        assert listed == {codes[0], codes[2]}


class TestDeleteEndpoint:
    """Test DELETE /api/links/{code}"""

    def test_delete(self, client: TestClient):
        code = client.post("/api/shorten", json={"url": "https://www.python.org"}).json()["short_code"]

        response = client.delete(f"/api/links/{code}")
        assert response.status_code == 200
        assert response.json() == {"message": "Link deleted successfully"}

        assert client.get(f"/{code}", follow_redirects=False).status_code == 404
        assert client.get(f"/api/info/{code}").status_code == 404

    def test_delete_nonexistent(self, client: TestClient):
        response = client.delete("/api/links/doesnotexist")
        assert response.status_code == 404


class TestServerErrors:
    """Server-side failures become 500 responses"""

    def test_storage_failure_on_create(self, client: TestClient, store, monkeypatch):
        from shortlink_app.exceptions import StorageError

        async def broken_exists(code):
            raise StorageError("connection refused")

        monkeypatch.setattr(store, "exists", broken_exists)

        response = client.post("/api/shorten", json={"url": "https://example.com/page"})
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    def test_every_candidate_taken_on_create(self, client: TestClient, store, monkeypatch):
        async def always_exists(code):
            return True

        monkeypatch.setattr(store, "exists", always_exists)

        response = client.post("/api/shorten", json={"url": "https://example.com/page"})
        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert client.get("/api/links").json() == []


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "environment": "test"}
