import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.setdefault("GOOGLE_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient

from quickchat.agents.assistant import get_responder
from quickchat.database.db import Base, SessionLocal, engine
from quickchat.main import app


class FakeResponder:
    """Stands in for the language model: echoes the prompt and records each call."""

    def __init__(self):
        self.calls = []
        self.error = None

    async def __call__(self, history, prompt):
        self.calls.append(([(m.role, m.content) for m in history], prompt))
        if self.error:
            raise self.error
        return f"echo: {prompt}"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def responder():
    return FakeResponder()


@pytest.fixture
def client(responder):
    app.dependency_overrides[get_responder] = lambda: responder
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name="Alice", email="alice@example.com", password="wonderland"):
    response = client.post("/api/user/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True, body
    return body["token"]
