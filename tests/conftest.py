"""Shared fixtures: in-memory MongoDB (mongomock) and a FastAPI test client."""

import os

# bcrypt au coût minimal pour des tests rapides (lu à l'import de config)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import mongomock
import pytest
from fastapi.testclient import TestClient

from app_factory import create_app
from repositories.activity import ActivityLogger
from repositories.clients import ClientStore
from repositories.notes import NoteStore
from repositories.users import UserStore


@pytest.fixture
def db():
    return mongomock.MongoClient().crm_test


@pytest.fixture
def activity(db) -> ActivityLogger:
    return ActivityLogger(db)


@pytest.fixture
def users(db, activity) -> UserStore:
    return UserStore(db, activity)


@pytest.fixture
def clients(db, activity) -> ClientStore:
    return ClientStore(db, activity)


@pytest.fixture
def notes(db, activity) -> NoteStore:
    return NoteStore(db, activity)


@pytest.fixture
def app(db):
    return create_app(lambda: db)


@pytest.fixture
def api(app) -> TestClient:
    # Pas de `with`: les événements de démarrage (index, planificateur) ne sont pas déclenchés
    return TestClient(app)


@pytest.fixture
def alice(users) -> dict:
    return users.create({"name": "Alice", "email": "alice@example.com", "role": "admin", "password": "s3cret"})


@pytest.fixture
def auth_headers(api, alice) -> dict:
    response = api.post("/auth/login", json={"email": "alice@example.com", "password": "s3cret"})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
