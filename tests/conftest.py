"""
tests/conftest.py -- Shared test fixtures for Tienda tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for identities + articles
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - hasher / codec: cheap PasswordHasher (4 rounds) and a TokenCodec with a known key
  - api_client: TestClient plus admin and standard tokens for integration tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

The DEBUG env var must be set before any api/core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import register_identity
from auth.models import Role
from auth.passwords import PasswordHasher
from auth.store import IdentityStore
from auth.tokens import TokenCodec
from catalog.store import ArticleStore

TEST_SECRET_KEY = "tienda-test-secret-key-0123456789abcdef"

ADMIN_USERNAME = "testadmin"
ADMIN_PASSWORD = "testpass123"
STANDARD_USERNAME = "testviewer"
STANDARD_PASSWORD = "viewpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[IdentityStore, ArticleStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    identity_url = f"sqlite:///file:test_identities_{db_suffix}?mode=memory&cache=shared&uri=true"
    article_url = f"sqlite:///file:test_articles_{db_suffix}?mode=memory&cache=shared&uri=true"
    return IdentityStore(db_url=identity_url), ArticleStore(db_url=article_url)


def _patch_lifespan(
    identity_store: IdentityStore,
    article_store: ArticleStore,
    hasher: PasswordHasher,
    codec: TokenCodec,
):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.identity_store = identity_store
        app.state.article_store = article_store
        app.state.hasher = hasher
        app.state.token_codec = codec
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    """bcrypt at the minimum cost factor -- same algorithm, fast enough for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def codec() -> TokenCodec:
    return TokenCodec(secret_key=TEST_SECRET_KEY)


# ---------------------------------------------------------------------------
# Module-scoped client -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(
    request: pytest.FixtureRequest,
    hasher: PasswordHasher,
    codec: TokenCodec,
) -> Generator[tuple[TestClient, dict[str, str]], None, None]:
    """Yield (client, tokens) for API integration tests.

    tokens maps "admin" and "standard" to valid tokens for two pre-registered
    identities (testadmin / testviewer). The TestClient uses the real FastAPI
    app with a patched lifespan so tests hit real route handlers against
    isolated in-memory stores.
    """
    identity_store, article_store = _make_test_stores(request.module.__name__.replace(".", "_"))

    admin = register_identity(identity_store, hasher, ADMIN_USERNAME, ADMIN_PASSWORD, Role.admin)
    viewer = register_identity(identity_store, hasher, STANDARD_USERNAME, STANDARD_PASSWORD)
    tokens = {
        "admin": codec.issue(str(admin.id), Role.admin),
        "standard": codec.issue(str(viewer.id), Role.standard),
    }

    app.router.lifespan_context = _patch_lifespan(identity_store, article_store, hasher, codec)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, tokens

    identity_store.close()
    article_store.close()


@pytest.fixture(scope="session")
def admin_credentials() -> dict[str, str]:
    """Login body for the admin identity pre-registered by api_client."""
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}


@pytest.fixture(scope="session")
def secret_key() -> str:
    """The signing key behind the codec fixture, for building tokens with other clocks."""
    return TEST_SECRET_KEY
