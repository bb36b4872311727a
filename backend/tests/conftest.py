import os
import tempfile
from datetime import datetime, timedelta, timezone

# Settings are read at import time, so the test environment must be in place
# before anything from app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="auction-uploads-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENABLE_SCHEDULER"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.main import app


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def future_time(hours: int = 24) -> str:
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


def signup(client, email, password="secret123", full_name="Test User", **extra):
    payload = {"fullName": full_name, "email": email, "password": password, **extra}
    return client.post("/api/signup", json=payload)


def signin(client, email, password="secret123"):
    return client.post("/api/signin", json={"email": email, "password": password})


@pytest.fixture
def make_user(client):
    """Register and sign in a user; returns (user_id, auth headers)"""
    def _make_user(email, password="secret123", full_name="Test User"):
        assert signup(client, email, password, full_name).status_code == 201
        token = signin(client, email, password).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}
        user_id = client.get("/api/profile", headers=headers).json()["id"]
        return user_id, headers
    return _make_user


@pytest.fixture
def create_auction(client):
    """Post an auction as the given user; returns the response"""
    def _create_auction(headers, files=None, **fields):
        data = {
            "itemName": "Vintage Camera",
            "description": "Working 35mm film camera",
            "startingBid": "100",
            "closingTime": future_time(),
            "category": "Electronics",
        }
        data.update(fields)
        data = {key: value for key, value in data.items() if value is not None}
        return client.post("/api/auction", data=data, files=files, headers=headers)
    return _create_auction
