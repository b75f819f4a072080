"""Pytest configuration for backend tests.

Every test gets a fresh in-memory AppContext in place of the configured one,
plus a signed-in admin.
"""

import sys
from pathlib import Path

import pytest

# Add repository root to path
root_dir = Path(__file__).parent.parent.parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from fastapi.testclient import TestClient

from mezmurhub.context import AppContext
from web.backend.deps import get_context
from web.backend.main import app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery"


@pytest.fixture
def ctx():
    context = AppContext.in_memory()
    app.dependency_overrides[get_context] = lambda: context
    yield context
    app.dependency_overrides.clear()


@pytest.fixture
def client(ctx):
    """Client without credentials."""
    return TestClient(app)


@pytest.fixture
def admin_token(ctx):
    ctx.auth.create_user(ADMIN_EMAIL, ADMIN_PASSWORD, is_admin=True)
    return ctx.auth.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD).token


@pytest.fixture
def auth_client(ctx, admin_token):
    """Client sending the admin's bearer token."""
    return TestClient(app, headers={"Authorization": f"Bearer {admin_token}"})
