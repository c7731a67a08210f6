"""
Shared fixtures: in-memory database, memory cache, local-only generation
"""
import os

# Must be set before any studyai module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["AI_RATE_LIMIT"] = "1000/minute"
os.environ.pop("LLM_API_KEY", None)
os.environ.pop("GROK_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from studyai.db import engine, init_db
from studyai.main import app


PHOTOSYNTHESIS = (
    "Photosynthesis is the process by which plants convert light energy into chemical energy. "
    "This process is essential for plant growth."
)


@pytest.fixture
def db():
    SQLModel.metadata.drop_all(engine)
    init_db()
    yield engine


@pytest.fixture
def client(db):
    return TestClient(app)


def register(client, email="student@example.com", password="secret-pass"):
    response = client.post("/auth/register", json={"email": email, "password": password, "full_name": "Student"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)
