"""
connecthub.services.message_service — Direct messages
======================================================

A conversation is the set of messages between two users in either
direction, ordered by ``created_at`` ascending.  Messages are never edited
or deleted; the only mutation is flipping ``is_read`` for the receiver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine, and_, case, func, or_, select, update
from sqlalchemy.orm import Session, aliased

from connecthub.constants import NotificationType
from connecthub.database.engine import get_session
from connecthub.database.models import Message, User
from connecthub.errors import NotFoundError
from connecthub.services.notification_service import add_notification

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 80


@dataclass(slots=True)
class ConversationSummary:
    """One row of the conversation list."""

    user: User
    last_message: Message
    unread_count: int


def _between(a: str, b: str):
    return or_(
        and_(Message.sender_id == a, Message.receiver_id == b),
        and_(Message.sender_id == b, Message.receiver_id == a),
    )


def create_message(
    engine: Engine,
    sender_id: str,
    receiver_id: str,
    content: str,
    photo_url: str | None = None,
) -> Message:
    """Store a message and notify the receiver."""
    with get_session(engine) as session:
        if session.get(User, receiver_id) is None:
            raise NotFoundError("User not found")
        msg = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            photo_url=photo_url,
        )
        session.add(msg)
        session.flush()

        sender = session.get(User, sender_id)
        name = (sender.display_name or sender.first_name) if sender else None
        preview = content if len(content) <= _PREVIEW_CHARS else content[:_PREVIEW_CHARS] + "…"
        add_notification(
            session,
            user_id=receiver_id,
            type=NotificationType.MESSAGE,
            title=f"New message from {name or 'someone'}",
            message=preview,
            related_id=sender_id,
            related_type="user",
        )
        return msg


def get_conversation(
    engine: Engine, user_a: str, user_b: str
) -> list[tuple[Message, User, User]]:
    """Messages between two users, oldest first, as ``(message, sender, receiver)``."""
    sender = aliased(User)
    receiver = aliased(User)
    with Session(engine) as session:
        rows = session.execute(
            select(Message, sender, receiver)
            .join(sender, sender.id == Message.sender_id)
            .join(receiver, receiver.id == Message.receiver_id)
            .where(_between(user_a, user_b))
            .order_by(Message.created_at.asc())
        ).all()
        return [(m, s, r) for m, s, r in rows]


def mark_messages_as_read(engine: Engine, user_id: str, sender_id: str) -> int:
    """Mark every unread message *sender_id* sent to *user_id* as read."""
    with get_session(engine) as session:
        result = session.execute(
            update(Message)
            .where(
                Message.receiver_id == user_id,
                Message.sender_id == sender_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True)
        )
        return result.rowcount


def get_unread_count(engine: Engine, user_id: str, sender_id: str | None = None) -> int:
    with Session(engine) as session:
        query = (
            select(func.count())
            .select_from(Message)
            .where(Message.receiver_id == user_id, Message.is_read.is_(False))
        )
        if sender_id is not None:
            query = query.where(Message.sender_id == sender_id)
        return session.scalar(query) or 0


def get_user_conversations(engine: Engine, user_id: str) -> list[ConversationSummary]:
    """One summary per counterpart, most recently active first."""
    counterpart = case(
        (Message.sender_id == user_id, Message.receiver_id),
        else_=Message.sender_id,
    )
    last_at = (
        select(counterpart.label("other_id"), func.max(Message.created_at).label("last_at"))
        .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .group_by(counterpart)
        .subquery()
    )
    with Session(engine) as session:
        rows = session.execute(
            select(Message, User)
            .join(
                last_at,
                and_(
                    Message.created_at == last_at.c.last_at,
                    _between(user_id, last_at.c.other_id),
                ),
            )
            .join(User, User.id == last_at.c.other_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
        ).all()
        if not rows:
            return []

        # two messages can share the latest timestamp; keep one
        latest: dict[str, tuple[Message, User]] = {}
        for msg, other in rows:
            latest.setdefault(other.id, (msg, other))

        unread = dict(session.execute(
            select(counterpart, func.count())
            .where(Message.receiver_id == user_id, Message.is_read.is_(False))
            .group_by(counterpart)
        ).all())
        return [
            ConversationSummary(user=other, last_message=msg, unread_count=unread.get(other_id, 0))
            for other_id, (msg, other) in latest.items()
        ]
