"""
tests/conftest.py -- Shared test fixtures for DevConnector integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for accounts + social data
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - make_user(): inserts an account straight into the store and mints its token
  - other_user: a second account for ownership tests
  - api_client: TestClient plus a pre-registered user and token

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

SECRET_KEY must be in the environment before any api/ import, because
get_settings() runs at import time and refuses to start without it.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/auth/core import.
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-chars")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app, init_app_state
from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from social.store import SocialStore

TEST_PASSWORD = "secret1"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, SocialStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (e.g. 'posts', 'profile').
    """
    auth_url = f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true"
    social_url = f"sqlite:///file:test_social_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=auth_url), SocialStore(db_url=social_url)


def _patch_lifespan(user_store: UserStore, social: SocialStore):
    """Return an async context manager that replaces the real lifespan.

    Uses the same init_app_state() as production so the guard, issuer and
    verifier are wired exactly as they are at runtime.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        init_app_state(app, get_settings(), user_store, social)
        yield

    return test_lifespan


def make_user(user_store: UserStore, name: str, email: str, password: str = TEST_PASSWORD) -> tuple[int, str]:
    """Insert an account directly and return (user_id, token)."""
    settings = get_settings()
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    uid = user_store.create_user(
        User(
            name=name,
            email=email,
            hashed_password=hasher.hash(password),
            avatar=f"https://www.gravatar.com/avatar/{name.lower()}",
        )
    )
    token = TokenIssuer(settings.auth_config()).issue(uid)
    return uid, token


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, int], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated in-memory stores. Each
    test module gets its own databases, named after the module.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, social = _make_test_stores(suffix)
    uid, token = make_user(user_store, "Alice", f"alice@{suffix.replace('_', '-')}.example.com")

    app.router.lifespan_context = _patch_lifespan(user_store, social)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    user_store.close()
    social.close()


@pytest.fixture(scope="module")
def other_user(api_client) -> tuple[str, int]:
    """A second account in the same databases, as (token, user_id)."""
    client, _token, _uid = api_client
    uid, token = make_user(client.app.state.user_store, "Bob", "bob@example.com")
    return token, uid
