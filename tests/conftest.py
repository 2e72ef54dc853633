"""
Shared fixtures for the DonorHub test suite.

Environment variables are set before the app is imported because the data and
auth modules read them at import time.
"""

import os
import tempfile
from typing import Generator

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="donorhub-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "text")

from fastapi.testclient import TestClient  # noqa: E402

from donorhub.data.base import Base, SessionLocal, create_tables, engine  # noqa: E402
from donorhub.main import app  # noqa: E402

TEST_USER = {"email": "staff@donorhub.org", "password": "s3cure-pass", "name": "Staff"}


def pytest_collection_modifyitems(config, items):
    """Tests under tests/api are marked `api`, everything else `unit`."""
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}api{os.sep}" in path:
            item.add_marker(pytest.mark.api)
        else:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_user() -> dict:
    return dict(TEST_USER)


@pytest.fixture
def auth_token(client: TestClient, test_user: dict) -> str:
    response = client.post("/api/auth/register", json=test_user)
    assert response.status_code == 201, response.text
    return response.json()["data"]["token"]


@pytest.fixture
def auth_client(client: TestClient, auth_token: str) -> TestClient:
    client.headers.update({"Authorization": f"Bearer {auth_token}"})
    return client


@pytest.fixture
def make_donor(auth_client: TestClient):
    counter = {"n": 0}

    def _make(**overrides) -> dict:
        counter["n"] += 1
        payload = {
            "name": f"Donor {counter['n']}",
            "email": f"donor{counter['n']}@donorhub.org",
        }
        payload.update(overrides)
        response = auth_client.post("/api/donors", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_campaign(auth_client: TestClient):
    def _make(**overrides) -> dict:
        payload = {"name": "Winter Appeal", "goal": 1000, "startDate": "2026-01-01"}
        payload.update(overrides)
        response = auth_client.post("/api/campaigns", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def make_donation(auth_client: TestClient):
    def _make(donor_id: int, **overrides) -> dict:
        payload = {
            "amount": 100,
            "date": "2026-01-01",
            "method": "check",
            "donorId": donor_id,
        }
        payload.update(overrides)
        response = auth_client.post("/api/donations", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
