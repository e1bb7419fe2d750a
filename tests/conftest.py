# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps SupabaseClient's methods for an in-memory store (fake_db)
# - Issues HS256 ID tokens accepted by the identity verifier
# =============================================================================

import os
import time

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

TEST_PROJECT_ID = "recipe-book-test"
TEST_JWT_SECRET = "test-secret-key-for-hs256-tokens"

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("FIREBASE_PROJECT_ID", TEST_PROJECT_ID)
os.environ.setdefault("AUTH_JWT_SECRET", TEST_JWT_SECRET)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from lib.supabase_client import SupabaseClient
from tests.fakes import PATCHED_METHODS, FakeSupabase


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_db(monkeypatch):
    """In-memory users/recipes tables behind SupabaseClient."""
    fake = FakeSupabase()
    monkeypatch.setattr(SupabaseClient, "get_client", fake.get_client)
    for name in PATCHED_METHODS:
        monkeypatch.setattr(SupabaseClient, name, getattr(fake, name))
    return fake


def issue_token(
    uid: str,
    email: str | None = None,
    name: str | None = None,
    expires_in: int = 3600,
    audience: str = TEST_PROJECT_ID,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """Sign an ID token the way the identity provider would (HS256 for tests)."""
    now = int(time.time())
    claims = {
        "sub": uid,
        "aud": audience,
        "iss": f"https://securetoken.google.com/{audience}",
        "iat": now,
        "exp": now + expires_in,
        "email": email if email is not None else f"{uid}@example.com",
    }
    if name:
        claims["name"] = name
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a uid."""
    def _headers(uid: str, **kwargs) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(uid, **kwargs)}"}
    return _headers


@pytest.fixture
def client(fake_db):
    """TestClient with the lifespan running (identity verifier on app.state)."""
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def lenient_client(fake_db):
    """TestClient that returns 500 responses instead of re-raising."""
    from app.main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def sample_recipe_payload():
    """Valid body for POST /api/recipes."""
    return {
        "title": "Chicken Tikka Masala",
        "image": "https://img.example.com/tikka.jpg",
        "ingredients": ["chicken", "yogurt", "garam masala", "tomato"],
        "instructions": "Marinate, grill, simmer in sauce.",
        "cuisineType": "Indian",
        "prepTime": 45,
        "categories": ["Dinner", "Lunch"],
    }
