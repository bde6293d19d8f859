"""Pytest fixtures: per-test SQLite database and a stubbed metadata resolver."""

import os

# Must be set before favset.config builds its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from favset import database
from favset.api.deps import get_metadata_service
from favset.config import settings
from favset.main import app
from favset.services.metadata import UNKNOWN_DOMAIN, UrlMetadata, extract_domain

PASSWORD = "correct horse battery"


class StubMetadataService:
    """Stands in for MetadataService; records every URL it is asked about."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.responses: dict[str, UrlMetadata] = {}

    async def resolve(self, url: str) -> UrlMetadata:
        self.calls.append(url)
        if url in self.responses:
            return self.responses[url]
        domain = extract_domain(url) or UNKNOWN_DOMAIN
        return UrlMetadata(domain=domain, title=f"Page on {domain}")


@pytest.fixture
def metadata_service() -> StubMetadataService:
    return StubMetadataService()


@pytest.fixture
def client(tmp_path, monkeypatch, metadata_service):
    monkeypatch.setattr(
        settings, "database_url", f"sqlite+aiosqlite:///{tmp_path / 'favset.db'}"
    )
    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "_session_factory", None)
    app.dependency_overrides[get_metadata_service] = lambda: metadata_service
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def register(client: TestClient, email: str, password: str = PASSWORD, **extra):
    response = client.post(
        "/api/auth/register", json={"email": email, "password": password, **extra}
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def user(client):
    """A registered user whose session cookie is set on ``client``."""
    return register(client, "alice@example.com", name="Alice")
