"""Pytest configuration for backend tests."""
import os
import pytest

# Disable rate limiting middleware and the database during tests
os.environ["TESTING"] = "1"
os.environ["USE_DATABASE"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret")


@pytest.fixture(scope="session")
def anyio_backend():
    """Specify the async backend for pytest-asyncio."""
    return "asyncio"
