"""
connecthub.services.notification_service — Per-user notifications
==================================================================

Notifications are append-only rows flagged read/unread.  Other services
queue them inside their own transaction through :func:`add_notification`
so a notification is never written for a mutation that rolled back.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from connecthub.database.engine import get_session
from connecthub.database.models import Notification
from connecthub.errors import NotFoundError

logger = logging.getLogger(__name__)


def add_notification(
    session: Session,
    *,
    user_id: str,
    type: str,
    title: str,
    message: str | None = None,
    related_id: str | None = None,
    related_type: str | None = None,
) -> Notification:
    """Queue a notification on an open session (no commit)."""
    row = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_id=related_id,
        related_type=related_type,
    )
    session.add(row)
    return row


def create_notification(engine: Engine, **fields) -> Notification:
    with get_session(engine) as session:
        row = add_notification(session, **fields)
        session.flush()
        return row


def get_notifications(engine: Engine, user_id: str) -> list[Notification]:
    """All of *user_id*'s notifications, newest first."""
    with Session(engine) as session:
        return list(session.scalars(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
        ).all())


def get_unread_notification_count(engine: Engine, user_id: str) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        ) or 0


def mark_notification_as_read(engine: Engine, notification_id: str, user_id: str) -> None:
    """Mark one notification read.  Only the owner can do this.

    Raises
    ------
    NotFoundError
        If no notification with that id belongs to *user_id*.
    """
    with get_session(engine) as session:
        result = session.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification not found")


def mark_all_notifications_as_read(engine: Engine, user_id: str) -> int:
    """Mark every unread notification of *user_id* read; return how many."""
    with get_session(engine) as session:
        result = session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        return result.rowcount
