"""
Shared fixtures. Every test gets a fresh in-memory SQLite database and an
in-memory queue in place of Redis.
"""

import logging
import os

# Must be set before the application modules build their engine.
os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from store_service.db import Base, SessionLocal, engine, get_db  # noqa: E402
from store_service.main import app  # noqa: E402
from store_service.messaging import get_queue  # noqa: E402
from tests.fakes import FakeQueue  # noqa: E402

# Suppress noisy logs from SQLAlchemy/FastAPI during tests for cleaner output
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("fastapi").setLevel(logging.WARNING)


@pytest.fixture
def db_session_for_test():
    """
    Provides a session on freshly created tables and points the app's
    `get_db` dependency at it. Tables are dropped again afterwards.
    """
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fake_queue():
    queue = FakeQueue()
    app.dependency_overrides[get_queue] = lambda: queue
    try:
        yield queue
    finally:
        app.dependency_overrides.pop(get_queue, None)


@pytest.fixture
def client(db_session_for_test, fake_queue):
    """
    Provides a TestClient for making HTTP requests to the FastAPI application.
    The TestClient automatically manages the app's lifespan events (startup/shutdown).
    """
    with TestClient(app) as test_client:
        yield test_client
