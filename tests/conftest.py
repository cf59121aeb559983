"""
Test configuration and fixtures for the shortlink service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink_app.config import Settings
from shortlink_app.storage.strategies import InMemoryLinkStore

TEST_BASE_URL = "http://sho.rt"


@pytest.fixture(scope="function")
def test_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        store_backend="memory",
        base_url=TEST_BASE_URL,
        click_workers=2,
        log_level="WARNING",
    )


@pytest.fixture(scope="function")
def store():
    """
    A fresh in-memory store for each test.
    This ensures tests are isolated and don't affect each other.
    """
    return InMemoryLinkStore()


@pytest.fixture(scope="function")
def client(test_settings, store):
    """
    Create a test client backed by the in-memory store.
    This is the main fixture that API tests will use.
    """
    app = create_app(test_settings, store=store)

    # Entering the client runs the lifespan (dispatcher workers start here)
    with TestClient(app) as test_client:
        yield test_client
