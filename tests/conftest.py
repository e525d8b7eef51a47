"""
Test configuration and fixtures for TinyLink.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from main import app
from tinylink_app.database.connection import create_db_engine
from tinylink_app.dependencies import get_link_store
from tinylink_app.store.strategies import SQLAlchemyLinkStore, InMemoryLinkStore


@pytest.fixture(scope="function")
def sqlalchemy_store(tmp_path):
    """
    SQLAlchemy store on a fresh SQLite file for each test.

    A file (not :memory:) so that worker threads get real, separate
    connections, which is what the concurrency tests need.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    store = SQLAlchemyLinkStore(engine)

    try:
        yield store
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def memory_store():
    return InMemoryLinkStore()


@pytest.fixture(params=["sqlalchemy", "memory"])
def store(request):
    """Run the test once against every local store backend"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture(scope="function")
def client(sqlalchemy_store):
    """
    Create a test client with the link store dependency overridden.
    This is the main fixture that API tests will use.
    """
    app.dependency_overrides[get_link_store] = lambda: sqlalchemy_store

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
