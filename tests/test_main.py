from __future__ import annotations

from fastapi.testclient import TestClient

from artwork_catalog.api import create_app
from artwork_catalog.config import reset_settings
from artwork_catalog.context import build_context


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_healthz(client: TestClient):
    """The /healthz endpoint reports storage location and database status."""
    response = client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert data["storage"].startswith("file://")


def test_healthz_without_database(settings, backend):
    client = TestClient(create_app(build_context(settings, backend=backend)))
    assert client.get("/healthz").json()["database"] == "disabled"


def test_version(client: TestClient):
    """Test the /version endpoint."""
    response = client.get("/version")
    assert response.status_code == 200
    # The version comes from the installed package metadata
    assert isinstance(response.json()["version"], str)


def test_cors_preflight(client: TestClient):
    response = client.options(
        "/api/v1/artworks",
        headers={
            "Origin": "https://portfolio.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_lifespan_builds_context_from_environment(monkeypatch, art_dir):
    monkeypatch.setenv("ARTWORKS_DIR", str(art_dir))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("BUCKET_NAME", raising=False)
    monkeypatch.delenv("BUCKET", raising=False)
    reset_settings()
    with TestClient(create_app()) as client:
        response = client.get("/api/v1/artworks")
        assert response.status_code == 200
        assert response.json()["total"] == 2
    reset_settings()
