"""
tests/conftest.py -- Shared test fixtures for Gatekeeper.

This module provides:
  - store / service: an in-memory UserStore and an AuthService over it
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient over the real FastAPI app with an isolated DB

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. Unit-test fixtures stay on one thread, so plain
:memory: is fine there.

JWT_SECRET must be set before any auth/core import so get_settings() never
falls back to the development default during tests.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-gatekeeper-suite")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthConfig, AuthService
from auth.store import UserStore

TEST_SECRET = os.environ["JWT_SECRET"]


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: UserStore) -> AuthService:
    return AuthService(store, AuthConfig(secret_key=TEST_SECRET))


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, auth_service: AuthService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.auth_service = auth_service
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, AuthService], None, None]:
    """Yield (client, service) for API integration tests.

    The service is the same instance the app uses, so tests can mint tokens
    (e.g. already-expired ones) that the routes will verify.
    """
    user_store = UserStore(f"sqlite:///file:test_auth_{os.getpid()}?mode=memory&cache=shared&uri=true")
    auth_service = AuthService(user_store, AuthConfig(secret_key=TEST_SECRET))

    app.router.lifespan_context = _patch_lifespan(user_store, auth_service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, auth_service

    user_store.close()
