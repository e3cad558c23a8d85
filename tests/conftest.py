"""Shared fixtures: in-memory database, per-user HTTP clients, fake image host."""
import os

# Must be set before the application modules read their settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAX_UPLOAD_SIZE"] = "1024"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from config import get_settings
from database import build_engine, get_session
from main import app
from utils.cloudinary import get_image_uploader


class FakeUploader:
    """Stands in for the image host; records uploads and returns a fixed URL."""

    def __init__(self):
        self.uploads = []

    def upload(self, content, user_id, filename="upload"):
        self.uploads.append((user_id, filename, content))
        return f"https://images.example.com/user-profiles/user-{user_id}.png"


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def engine():
    import models  # noqa: F401

    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def uploader():
    return FakeUploader()


@pytest.fixture()
def make_client(engine, uploader):
    """Factory for TestClients sharing one database; each keeps its own cookies."""

    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_image_uploader] = lambda: uploader

    def _make_client(**kwargs):
        return TestClient(app, **kwargs)

    yield _make_client

    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client):
    return make_client()


def register_user(client, name="Alice", email="alice@example.com", password="secret123"):
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["user"]


@pytest.fixture()
def alice(make_client):
    client = make_client()
    client.user = register_user(client)
    return client


@pytest.fixture()
def bob(make_client):
    client = make_client()
    client.user = register_user(client, name="Bob", email="bob@example.com", password="hunter22")
    return client
