"""
Pytest configuration for Ledgerbooks backend tests.

Sets up the test environment and global fixtures. Every test gets a fresh
in-memory database; route tests talk to it through the app's get_database
dependency.
"""
import os

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables (before any ledgerbooks import)
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-with-enough-bytes-for-hs256")
os.environ.setdefault("COOKIE_SECURE", "false")

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ledgerbooks.auth.dependencies import AuthenticatedUser, get_authenticated_user  # noqa: E402
from ledgerbooks.db import MemoryDatabase, get_database  # noqa: E402
from ledgerbooks.main import app  # noqa: E402

TEST_USER_ID = "test-user-id"
OTHER_USER_ID = "other-user-id"


async def mock_get_authenticated_user_dependency():
    """Mock dependency that returns test AuthenticatedUser."""
    return AuthenticatedUser(
        user_id=TEST_USER_ID,
        access_token="test-access-token"
    )


@pytest.fixture
def db():
    """Fresh in-memory store."""
    return MemoryDatabase()


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client for testing the Supabase-backed store.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def mock_auth():
    """Override get_authenticated_user dependency."""
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.pop(get_authenticated_user, None)


@pytest.fixture
def client(db):
    """TestClient wired to the fresh in-memory store."""
    app.dependency_overrides[get_database] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_database, None)
