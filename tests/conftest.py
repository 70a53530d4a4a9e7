"""
Test configuration and fixtures for the short link service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from shortlink_app.config import Settings, get_settings
from shortlink_app.database.connection import Base, get_db
from shortlink_app.dependencies import get_visit_recorder
from shortlink_app.models import Link
from shortlink_app.queue.factory import QueueFactory
from shortlink_app.services.visit_recorder import VisitRecorder
from shortlink_app.storage.factory import VisitStorageFactory
from shortlink_app.storage.strategies import SQLVisitStorage

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped afterwards so tests don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings():
    """Settings without a creation password. Override per test class to change."""
    return Settings(_env_file=None, access_password=None, public_base_url=None)


@pytest.fixture
def visit_recorder():
    """Writes visits to the test database directly."""
    return VisitRecorder(storage=SQLVisitStorage(session_factory=TestingSessionLocal))


@pytest.fixture(scope="function")
def client(db_session, test_settings, visit_recorder):
    """
    Test client with database, settings and visit recorder overridden.
    This is the main fixture that tests will use.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_visit_recorder] = lambda: visit_recorder

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_link(db_session):
    """Insert a link row directly, bypassing the creation API."""
    def _make_link(slug="abc1", url="https://example.com/page", **fields):
        fields.setdefault("status", 1)
        link = Link(slug=slug, url=url, **fields)
        db_session.add(link)
        db_session.commit()
        db_session.refresh(link)
        return link

    return _make_link


@pytest.fixture
def session_factory():
    """Session factory bound to the test database."""
    return TestingSessionLocal


@pytest.fixture
def fresh_visit_recorder():
    """Let get_visit_recorder build its recorder from current settings, then forget it."""
    def _reset():
        get_visit_recorder.cache_clear()
        QueueFactory.clear_instance()
        VisitStorageFactory.clear_instance()

    _reset()
    yield get_visit_recorder
    _reset()
