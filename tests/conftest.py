"""
Main conftest file that imports and re-exports all fixtures from modular files.
"""

import os

from dotenv import load_dotenv

# Explicitly load the test environment variables before importing any app modules
dotenv_path = os.path.join(os.path.dirname(__file__), "..", ".env.test")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path, override=True)
else:
    print(f"Warning: .env.test file not found at {dotenv_path}")
    os.environ.setdefault("TASK_SERVICE_ENVIRONMENT", "testing")
    os.environ.setdefault("TASK_SERVICE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    os.environ.setdefault("TASK_SERVICE_JWT_SECRET_KEY", "test-secret-key-for-task-service")

import pytest

# Import and re-export fixtures from modular files
from tests.fixtures.client import client
from tests.fixtures.db import file_task_store, session_factory, task_store, test_engine
from tests.fixtures.helpers import auth_headers, make_principal, make_token

# The imports above register the fixtures with pytest so they are available
# to all test modules without explicit imports


@pytest.fixture
def token_factory():
    """Return the make_token helper directly as a fixture."""
    return make_token


@pytest.fixture
def principal_factory():
    """Return the make_principal helper directly as a fixture."""
    return make_principal


@pytest.fixture
def headers_for():
    """Return the auth_headers helper directly as a fixture."""
    return auth_headers
