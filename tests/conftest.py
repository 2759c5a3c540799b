"""
Shared test fixtures.

Every test gets a fresh in-memory MongoDB (mongomock) swapped in through
app.db.mongodb.set_mongo_db, so services and routes run unchanged.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.db import mongodb


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["placedin_test"]
    mongodb.set_mongo_db(db)
    yield db
    mongodb.set_mongo_db(None)


@pytest.fixture
def client(mongo_db):
    from app.main import app

    # Not used as a context manager: the lifespan (indexes, sweeper) stays off
    return TestClient(app)


@pytest.fixture
def service_headers():
    return {"X-Service-Key": get_settings().service_api_key}


@pytest.fixture
def login(client, service_headers):
    """Create a session through the API and return auth headers for it."""

    def _login(user_id: str = "user-1", role: str = "student", **extra) -> dict:
        body = {"user_id": user_id, "google_id": f"google-{user_id}", "role": role, **extra}
        response = client.post("/api/sessions", json=body, headers=service_headers)
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
def admin_headers(login):
    return login("admin-1", role="admin")
