import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite:///./test_topup.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "development"
os.environ["RATE_LIMIT"] = "30/minute"

import pytest
from fastapi.testclient import TestClient

from topup.crud import init_db
from topup.database import Base, engine, SessionLocal
from topup.main import app as fastapi_app, limiter
from topup.sessions import SessionStore


@pytest.fixture(autouse=True)
def setup_db():
    # Setup: create the tables and the bootstrap admin
    init_db()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=3600)


@pytest.fixture
def client(monkeypatch, store):
    monkeypatch.setattr(fastapi_app.state, "sessions", store)
    limiter.reset()
    with TestClient(fastapi_app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    response = client.post(
        "/api/admin/login", json={"username": "admin", "password": "changeit"}
    )
    assert response.status_code == 200
    return client
