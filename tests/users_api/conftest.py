"""
pytest configuration and fixtures for the users API suite
"""

import pytest
from fastapi.testclient import TestClient

from app import app
from database.connection import get_db_pool
from users_api.fakes import FakeDatabase


@pytest.fixture
def fake_db():
    """Fresh in-memory database for every test"""
    return FakeDatabase()


@pytest.fixture
def client(fake_db):
    """HTTP client whose requests run against the fake pool"""
    app.dependency_overrides[get_db_pool] = lambda: fake_db
    try:
        # not entered as a context manager: the lifespan would open a real pool
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    return {"name": "Ann", "email": "ann@x.com", "password": "secret1"}


@pytest.fixture
def address_payload():
    return {
        "address_line": "221B Baker Street",
        "city": "London",
        "state": "Greater London",
        "postal_code": "NW1 6XE",
        "country": "UK",
    }
