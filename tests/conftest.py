import os

os.environ.setdefault("JWT_SECRET", "test-secret-with-at-least-32-bytes!")
os.environ.setdefault("STORY_SWEEP_SECONDS", "3600")
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from socialhub.database import connection
from socialhub.main import create_app


@pytest.fixture()
def db():
    """A fresh in-memory database per test."""
    return AsyncMongoMockClient()["socialhub_test"]


@pytest.fixture()
def app(db):
    connection.use_database(db)
    yield create_app()
    connection.use_database(None)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, username: str, password: str = "secret123") -> dict:
    """Create a user through the API and return {"id", "token", "headers"}."""
    response = client.post(
        "/api/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return {
        "id": body["user"]["id"],
        "token": body["access_token"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture()
def alice(client):
    return register(client, "alice")


@pytest.fixture()
def bob(client):
    return register(client, "bob")


@pytest.fixture()
def carol(client):
    return register(client, "carol")
