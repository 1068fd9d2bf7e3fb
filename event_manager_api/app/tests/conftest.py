from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from event_manager_api.app.core.config import Settings
from event_manager_api.app.main import create_app
from event_manager_api.app.tests.helpers import iso_in


@pytest.fixture
def settings(tmp_path) -> Settings:
    # Each test gets its own SQLite file.
    return Settings(
        database_url=str(tmp_path / "test.db"),
        secret_key="test-secret",
        environment="test",
        debug=False,
        api_prefix="/api",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI):
    # Entering the context runs the lifespan, which applies migrations.
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client: TestClient) -> Callable[..., dict]:
    """Sign up a user; returns its id, token and ready-made auth headers."""

    def _make_user(email: str, name: str = "Test User", password: str = "secret123") -> dict:
        response = client.post(
            "/api/auth/register",
            json={"email": email, "name": name, "password": password},
        )
        assert response.status_code == 201, response.json()
        body = response.json()
        return {
            "id": body["user"]["id"],
            "email": body["user"]["email"],
            "password": password,
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _make_user


@pytest.fixture
def alice(make_user) -> dict:
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def bob(make_user) -> dict:
    return make_user("bob@example.com", name="Bob")


@pytest.fixture
def make_event(client: TestClient) -> Callable[..., dict]:
    """Create an event as ``owner`` and return the stored event."""

    def _make_event(owner: dict, **overrides) -> dict:
        payload = {
            "title": "Yoga Class",
            "description": "A relaxing yoga session",
            "date_time": iso_in(7),
            "location": "Community Hall",
            "max_capacity": 10,
        }
        payload.update(overrides)
        response = client.post("/api/events", json=payload, headers=owner["headers"])
        assert response.status_code == 201, response.json()
        return response.json()["event"]

    return _make_event
