"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("PROGRESS_DEBOUNCE_MS", "0")
os.environ.setdefault("EXIT_INTENT_ARM_DELAY_MS", "0")

from interlock.core.storage import InMemoryKeyValueStore  # noqa: E402

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache.

    Yields:
        Settings: Test configuration settings.
    """
    from interlock.core.config import get_settings

    # Clear the cache to ensure fresh settings
    get_settings.cache_clear()

    settings = get_settings()
    yield settings

    # Clean up cache after tests
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake millisecond clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Provide an empty persistent medium."""
    return InMemoryKeyValueStore()


@pytest.fixture
def session_store() -> InMemoryKeyValueStore:
    """Provide an empty per-browser-session medium."""
    return InMemoryKeyValueStore()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Entering the client runs the lifespan, so every test gets a fresh
    in-memory medium and a wizard restored at home.

    Yields:
        TestClient: FastAPI test client.
    """
    from interlock.main import app

    with TestClient(app) as test_client:
        yield test_client
