"""
connecthub.database.engine — Database Connection & Session Helper
==================================================================

Every service function receives an :class:`Engine` and opens its own
short-lived session, so one HTTP request maps to one or a few small
transactions.  The engine is built once per process from ``DATABASE_URL``.

Usage::

    from connecthub.database.engine import create_db_engine, get_session, init_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    with get_session(engine) as session:
        session.add(Interest(name="Hiking"))
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import Engine, Select, create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from connecthub.database.models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine() -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    Pool sizing:
    * ``pool_size=5`` — five persistent connections.
    * ``max_overflow=10`` — up to 10 extra connections under load.
    * ``pool_timeout=10`` — fail after 10 s if no connection is available.
    * ``pool_recycle=3600`` — recycle connections after 1 hour.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    engine = create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=10,
        pool_recycle=3600,
    )
    logger.info("Database engine created → %s", engine.url.host)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine, *, seed_catalog: bool = True) -> None:
    """Create all tables defined in :mod:`connecthub.database.models`.

    Safe to call on every startup.  When *seed_catalog* is set, inserts the
    default interests, hobbies and skills that are not already present.

    .. note::

        In production the schema is managed by Alembic (``alembic upgrade
        head``).  ``create_all`` covers dev/test databases.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    if seed_catalog:
        from connecthub.database.seed import seed_default_catalog

        seed_default_catalog(engine)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """Yield a :class:`Session` that commits on success and rolls back on
    exception.

    Objects stay readable after the block exits (``expire_on_commit=False``)
    so services can hand them to the routes for serialization.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def insert_once(session: Session, row: T, existing: Select) -> tuple[T, bool]:
    """Insert *row* unless the unique key selected by *existing* is taken.

    A SAVEPOINT wraps the insert so a concurrent duplicate surfaces as an
    ``IntegrityError`` that is recovered without losing the outer
    transaction.  Returns ``(row, created)``.
    """
    found = session.scalar(existing)
    if found is not None:
        return found, False
    try:
        with session.begin_nested():
            session.add(row)
            session.flush()
    except IntegrityError:
        found = session.scalar(existing)
        if found is None:
            raise
        return found, False
    return row, True
