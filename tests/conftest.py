"""Shared fixtures for all tests.

Uses a throwaway SQLite file so the web app and the store inspector share
one database through separate connections, like they do in production.
The tables are recreated for every test function.
"""

import os

# Force the test database before any eventmi imports
os.environ["DATABASE_URL"] = "sqlite:///./test_eventmi.db"
os.environ["BASE_URL"] = "http://testserver"
os.environ["WIRE_TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eventmi.config import get_settings
from eventmi.database import Base, get_db
from eventmi.main import app
from eventmi.verifier.client import EndpointClient
from eventmi.verifier.harness import VerificationHarness
from eventmi.verifier.inspector import StoreInspector
from eventmi.verifier.request_builder import RequestBuilder

TEST_DATABASE_URL = "sqlite:///./test_eventmi.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_db():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    """Provide a database session for test helpers."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """TestClient that uses the test database, one session per request."""

    def _override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def builder():
    return RequestBuilder("UTC")


@pytest.fixture
def endpoint(client, settings):
    """EndpointClient dispatching through the in-process app."""
    return EndpointClient(http=client, settings=settings)


@pytest.fixture
def inspector():
    return StoreInspector(engine)


@pytest.fixture
def harness(endpoint, inspector, builder):
    return VerificationHarness(endpoint, inspector, builder)


# ============== Factory helpers ==============

@pytest.fixture
def create_event(client, inspector):
    """Factory to create an event through the add page and return its record."""

    _counter = [0]

    def _create(**overrides):
        _counter[0] += 1
        data = {
            "Name": f"Test Event {_counter[0]}",
            "Start": "09/29/2024 09:00 AM",
            "End": "09/29/2024 07:00 PM",
            "Place": "Sofia Tech Park",
        }
        data.update(overrides)
        r = client.post("/Event/Add", data=data, follow_redirects=False)
        assert r.status_code == 303, r.text
        record = inspector.get_by_name(data["Name"])
        assert record is not None
        return record

    return _create
