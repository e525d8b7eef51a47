from fastapi.testclient import TestClient

from main import app
from tinylink_app.config import settings
from tinylink_app.dependencies import get_link_service
from tinylink_app.services.link_service import LinkService
from tinylink_app.services.short_code_strategies import ShortCodeStrategy


class TestLinksAPI:
    """Test the /api/links endpoints"""

    def test_create_link(self, client: TestClient):
        """Test creating a link with a custom code"""
        link_data = {"url": "https://example.com/test", "code": "test123"}

        response = client.post("/api/links", json=link_data)
        assert response.status_code == 201

        data = response.json()
        assert data["code"] == "test123"
        assert data["url"] == "https://example.com/test"
        assert data["clicks"] == 0
        assert data["lastClicked"] is None
        assert data["shortUrl"] == f"{settings.base_url}/test123"
        assert data["id"]
        assert data["createdAt"]

    def test_link_json_uses_camel_case_keys(self, client: TestClient):
        client.post("/api/links", json={"url": "https://example.com", "code": "test123"})
        client.get("/test123", follow_redirects=False)

        for data in (client.get("/api/links/test123").json(), client.get("/api/links").json()[0]):
            assert set(data) == {"id", "code", "url", "clicks", "createdAt", "lastClicked", "shortUrl"}
            assert data["clicks"] == 1
            assert data["lastClicked"] is not None

    def test_create_link_generates_code(self, client: TestClient):
        response = client.post("/api/links", json={"url": "https://example.com"})
        assert response.status_code == 201

        code = response.json()["code"]
        assert 6 <= len(code) <= 8
        assert code.isalnum()

    def test_create_duplicate_code(self, client: TestClient):
        link_data = {"url": "https://example.com/test", "code": "test123"}
        client.post("/api/links", json=link_data)

        response = client.post("/api/links", json=link_data)
        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_invalid_url(self, client: TestClient):
        response = client.post("/api/links", json={"url": "not-a-valid-url", "code": "test456"})
        assert response.status_code == 400

    def test_invalid_code(self, client: TestClient):
        response = client.post("/api/links", json={"url": "https://example.com", "code": "12"})
        assert response.status_code == 400

    def test_wrong_body_shape(self, client: TestClient):
        """Shape errors are rejected by the request schema"""
        assert client.post("/api/links", json={"code": "test123"}).status_code == 422
        assert client.post("/api/links", json={"url": 42}).status_code == 422

    def test_list_links(self, client: TestClient):
        client.post("/api/links", json={"url": "https://example.com/1", "code": "first1"})
        client.post("/api/links", json={"url": "https://example.com/2", "code": "second2"})

        response = client.get("/api/links")
        assert response.status_code == 200

        codes = [link["code"] for link in response.json()]
        assert codes == ["second2", "first1"]

    def test_get_link_stats(self, client: TestClient):
        client.post("/api/links", json={"url": "https://example.com/test", "code": "test123"})

        response = client.get("/api/links/test123")
        assert response.status_code == 200

        data = response.json()
        assert data["code"] == "test123"
        assert data["url"] == "https://example.com/test"

    def test_get_nonexistent_link(self, client: TestClient):
        response = client.get("/api/links/notfound")
        assert response.status_code == 404

    def test_get_stats_invalid_code(self, client: TestClient):
        response = client.get("/api/links/ab")
        assert response.status_code == 400

    def test_delete_link(self, client: TestClient):
        client.post("/api/links", json={"url": "https://example.com/test", "code": "test123"})

        response = client.delete("/api/links/test123")
        assert response.status_code == 200
        assert response.json() == {"message": "Link deleted successfully"}

        assert client.get("/api/links/test123").status_code == 404
        assert client.get("/test123", follow_redirects=False).status_code == 404

    def test_delete_nonexistent_link(self, client: TestClient):
        response = client.delete("/api/links/notfound")
        assert response.status_code == 404


class TestRedirect:
    """Test the /{code} redirect"""

    def test_redirect_increments_clicks(self, client: TestClient):
        client.post("/api/links", json={"url": "https://example.com/test", "code": "test123"})

        response = client.get("/test123", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/test"

        stats = client.get("/api/links/test123").json()
        assert stats["clicks"] == 1
        assert stats["lastClicked"] is not None

    def test_redirect_nonexistent_code(self, client: TestClient):
        response = client.get("/notfound", follow_redirects=False)
        assert response.status_code == 404

    def test_redirect_malformed_code(self, client: TestClient):
        response = client.get("/ab", follow_redirects=False)
        assert response.status_code == 404


class TestHealth:
    def test_healthz(self, client: TestClient):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"ok": True, "version": settings.app_version}

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class AlwaysSameStrategy(ShortCodeStrategy):
    def generate(self) -> str:
        return "taken01"


def test_generation_exhausted_is_service_unavailable(client: TestClient, sqlalchemy_store):
    """A full code space is a retry-later condition, not a caller error"""
    client.post("/api/links", json={"url": "https://example.com", "code": "taken01"})
    app.dependency_overrides[get_link_service] = lambda: LinkService(
        sqlalchemy_store, code_strategy=AlwaysSameStrategy()
    )

    response = client.post("/api/links", json={"url": "https://example.com/other"})

    assert response.status_code == 503
    assert "Retry-After" in response.headers


def test_full_flow(client: TestClient):
    """create -> redirect -> stats -> delete -> stats"""
    created = client.post("/api/links", json={"url": "https://example.com", "code": "test123"})
    assert created.status_code == 201
    assert created.json()["clicks"] == 0

    redirect = client.get("/test123", follow_redirects=False)
    assert redirect.status_code == 302
    assert redirect.headers["location"] == "https://example.com"

    stats = client.get("/api/links/test123").json()
    assert stats["clicks"] == 1
    assert stats["lastClicked"] is not None

    assert client.delete("/api/links/test123").status_code == 200
    assert client.get("/api/links/test123").status_code == 404
