"""
tests/conftest.py -- Shared test fixtures for SessionGate.

This module provides:
  - user_store / hasher / gateway / signup_service: isolated unit-test
    collaborators backed by a per-test SQLite file
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client: TestClient over the real FastAPI app for integration tests

Design: SQLite files under pytest's tmp_path rather than :memory:. TestClient
runs sync route handlers in a thread pool, and a plain :memory: database is
per-connection -- each worker thread would see a blank schema.

Environment variables must be set before any api/auth/core import:
  DEBUG=true           lets get_settings() auto-generate SECRET_KEY
  BCRYPT_ROUNDS=4      bcrypt's minimum cost keeps the suite fast
  LOGIN_RATE_LIMIT     raised so the suite's many logins are not throttled
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core import so get_settings() sees it.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "10000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.gateway import AuthGateway
from auth.models import NewUser
from auth.passwords import PasswordHasher
from auth.sessions import SessionStore
from auth.signup import SignupService
from auth.store import UserStore
from auth.verifier import CredentialVerifier
from core.config import get_settings

# ---------------------------------------------------------------------------
# Unit-test collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store(tmp_path) -> Generator[UserStore, None, None]:
    store = UserStore(f"sqlite:///{tmp_path / 'auth.db'}")
    yield store
    store.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def signup_service(user_store: UserStore, hasher: PasswordHasher) -> SignupService:
    return SignupService(user_store, hasher, min_password_length=8)


@pytest.fixture
def gateway(user_store: UserStore, hasher: PasswordHasher, sessions: SessionStore) -> AuthGateway:
    return AuthGateway(CredentialVerifier(user_store, hasher), user_store, sessions)


@pytest.fixture
def alice(signup_service: SignupService):
    """A registered user: alice / a@x.com / longpass1."""
    return signup_service.sign_up(NewUser(username="alice", email="a@x.com", password="longpass1"))


# ---------------------------------------------------------------------------
# Integration client
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so TestClient routes see
    an isolated database rather than the configured DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, user_store, get_settings())
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app with an isolated account database.

    Module-scoped for speed: sessions and accounts persist across the tests in
    one module, so tests pick distinct usernames.
    """
    db_path = tmp_path_factory.mktemp("api") / "auth.db"
    user_store = UserStore(f"sqlite:///{db_path}")

    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    user_store.close()
