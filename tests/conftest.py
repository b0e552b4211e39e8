"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of connecthub.api.deps, which
# validates the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from connecthub.config import ConnectHubConfig  # noqa: E402
from connecthub.database.models import Base, User  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Render PG JSONB as TEXT on SQLite (idempotent).

    Also maps BigInteger → INTEGER so autoincrement works on SQLite.
    """
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy import BigInteger
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    @compiles(BigInteger, "sqlite")
    def _compile_bigint_as_integer(type_, compiler, **kw):
        return "INTEGER"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """An in-memory SQLite engine with every ConnectHub table.

    StaticPool keeps one shared connection so worker threads
    (``asyncio.to_thread`` in the rate limiter, TestClient's threadpool)
    see the same database.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def fk_engine() -> Engine:
    """Like :func:`db_engine` but with SQLite foreign keys enforced, as on PostgreSQL."""
    from sqlalchemy import event
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine(db_engine):
    return db_engine


@pytest.fixture
def test_config() -> ConnectHubConfig:
    return ConnectHubConfig(
        app_name="ConnectHub Test",
        api_port=8000,
        discover_default_limit=10,
        discover_max_limit=50,
        feed_limit=50,
        mutation_rate_limit=30,
        mutation_window_seconds=60,
        seed_catalog=False,
    )


def make_user(engine: Engine, user_id: str, **fields) -> User:
    """Insert a user row directly.  Usable as a plain factory in any test."""
    fields.setdefault("display_name", user_id.capitalize())
    with Session(engine, expire_on_commit=False) as session:
        user = User(id=user_id, **fields)
        session.add(user)
        session.commit()
        return user


@pytest.fixture
def users(db_engine):
    """Three signed-in users: alice, bob and carol."""
    return {uid: make_user(db_engine, uid) for uid in ("alice", "bob", "carol")}


def make_token(sub: str = "alice", **claims) -> str:
    """Mint a bearer JWT signed with the test secret."""
    import jwt

    from connecthub.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode({"sub": sub, **claims}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth(sub: str = "alice", **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


@pytest.fixture
def client(db_engine, test_config):
    """A TestClient bound to the in-memory database.

    The lifespan does not run outside a ``with`` block, so the limiter is
    armed here against the same engine.
    """
    from fastapi.testclient import TestClient

    from connecthub.api.deps import get_config, get_engine
    from connecthub.api.main import app
    from connecthub.api.rate_limit import configure_rate_limiter

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    configure_rate_limiter(
        engine=db_engine,
        max_requests=test_config.mutation_rate_limit,
        window_seconds=test_config.mutation_window_seconds,
    )
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
