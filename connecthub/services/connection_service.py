"""
connecthub.services.connection_service — Connection requests
=============================================================

A connection is a directed request ``requester → receiver`` whose status
moves ``pending → accepted | declined`` exactly once, and only at the
receiver's hand.

At most one row may exist per unordered user pair.  The pre-check gives
the friendly error; the unique constraint on ``(pair_low, pair_high)``
catches two requests racing past it.  A declined row still occupies the
pair, so neither side can re-request.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from connecthub.constants import (
    RESOLUTION_STATUSES,
    ActivityType,
    ConnectionStatus,
    NotificationType,
)
from connecthub.database.engine import get_session
from connecthub.database.models import Connection, User
from connecthub.errors import (
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from connecthub.services.activity_service import add_activity
from connecthub.services.notification_service import add_notification

logger = logging.getLogger(__name__)


def _pair(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a < b else (b, a)


def _between(a: str, b: str):
    low, high = _pair(a, b)
    return (Connection.pair_low == low) & (Connection.pair_high == high)


def _name(user: User | None, fallback: str) -> str:
    if user is None:
        return fallback
    return user.display_name or user.first_name or fallback


def get_connection_status(engine: Engine, user_a: str, user_b: str) -> Connection | None:
    """The connection row between two users in either direction, if any."""
    with Session(engine) as session:
        return session.scalar(select(Connection).where(_between(user_a, user_b)))


def create_connection_request(engine: Engine, requester_id: str, receiver_id: str) -> Connection:
    """Open a pending request from *requester_id* to *receiver_id*.

    Raises
    ------
    InvalidStateError
        Requesting yourself.
    NotFoundError
        Either party has never signed in.
    DuplicateError
        Any row already exists for the pair, whatever its status or direction.
    """
    if requester_id == receiver_id:
        raise InvalidStateError("Cannot connect with yourself")

    low, high = _pair(requester_id, receiver_id)
    try:
        with get_session(engine) as session:
            requester = session.get(User, requester_id)
            if requester is None or session.get(User, receiver_id) is None:
                raise NotFoundError("User not found")
            if session.scalar(select(Connection.id).where(_between(low, high))) is not None:
                raise DuplicateError("Connection already exists")

            conn = Connection(
                requester_id=requester_id,
                receiver_id=receiver_id,
                status=ConnectionStatus.PENDING,
                pair_low=low,
                pair_high=high,
            )
            session.add(conn)
            session.flush()

            add_notification(
                session,
                user_id=receiver_id,
                type=NotificationType.CONNECTION_REQUEST,
                title="New connection request",
                message=f"{_name(requester, 'Someone')} wants to connect with you",
                related_id=requester_id,
                related_type="user",
            )
    except IntegrityError as exc:
        # Only a row now occupying the pair makes this a duplicate
        if get_connection_status(engine, low, high) is None:
            raise
        logger.warning("Racing connection request %s → %s rejected", requester_id, receiver_id)
        raise DuplicateError("Connection already exists") from exc

    logger.info("Connection request %s → %s (%s)", requester_id, receiver_id, conn.id)
    return conn


def update_connection_status(
    engine: Engine, connection_id: str, status: str, acting_user_id: str
) -> Connection:
    """Resolve a pending request.

    Only the receiver may resolve, and only once.  Accepting notifies the
    requester and records a public activity for the receiver.
    """
    if status not in RESOLUTION_STATUSES:
        raise InvalidStateError("Invalid status")

    with get_session(engine) as session:
        conn = session.get(Connection, connection_id)
        if conn is None:
            raise NotFoundError("Connection not found")
        if conn.receiver_id != acting_user_id:
            raise PermissionDeniedError("Only the receiver can respond to this request")
        if conn.status != ConnectionStatus.PENDING:
            raise InvalidStateError("Connection request already resolved")

        conn.status = status
        conn.updated_at = datetime.now(UTC)

        if status == ConnectionStatus.ACCEPTED:
            receiver = session.get(User, conn.receiver_id)
            requester = session.get(User, conn.requester_id)
            add_notification(
                session,
                user_id=conn.requester_id,
                type=NotificationType.CONNECTION_ACCEPTED,
                title="Connection accepted",
                message=f"{_name(receiver, 'Someone')} accepted your connection request",
                related_id=conn.receiver_id,
                related_type="user",
            )
            add_activity(
                session,
                user_id=conn.receiver_id,
                type=ActivityType.CONNECTION,
                title=f"Connected with {_name(requester, 'a new friend')}",
                metadata={"connection_id": conn.id, "user_id": conn.requester_id},
            )
        session.flush()

    logger.info("Connection %s %s by %s", connection_id, status, acting_user_id)
    return conn


def get_user_connections(
    engine: Engine, user_id: str, status: str = ConnectionStatus.ACCEPTED
) -> list[tuple[Connection, User]]:
    """Connections touching *user_id* with *status*, each with the other user."""
    other = aliased(User)
    with Session(engine) as session:
        rows = session.execute(
            select(Connection, other)
            .join(
                other,
                or_(
                    (Connection.requester_id == user_id) & (other.id == Connection.receiver_id),
                    (Connection.receiver_id == user_id) & (other.id == Connection.requester_id),
                ),
            )
            .where(Connection.status == status)
            .order_by(Connection.updated_at.desc())
        ).all()
        return [(c, u) for c, u in rows]


def get_pending_connection_requests(engine: Engine, user_id: str) -> list[tuple[Connection, User]]:
    """Requests awaiting *user_id*'s answer, newest first, with the requester."""
    with Session(engine) as session:
        rows = session.execute(
            select(Connection, User)
            .join(User, User.id == Connection.requester_id)
            .where(
                Connection.receiver_id == user_id,
                Connection.status == ConnectionStatus.PENDING,
            )
            .order_by(Connection.created_at.desc())
        ).all()
        return [(c, u) for c, u in rows]
