"""
connecthub.services.event_service — Events and attendance
==========================================================

``attendee_count`` caches the number of ``going`` attendance rows and is
recomputed after every join/leave.  ``max_attendees`` (when set) caps that
number; ``maybe`` and ``not_going`` answers never count against it.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, delete, func, or_, select, update
from sqlalchemy.orm import Session

from connecthub.constants import ActivityType, AttendanceStatus, NotificationType
from connecthub.database.engine import get_session
from connecthub.database.models import Event, EventAttendee, User
from connecthub.errors import InvalidStateError, NotFoundError
from connecthub.services.activity_service import add_activity
from connecthub.services.notification_service import add_notification

logger = logging.getLogger(__name__)

_EVENT_FIELDS = frozenset({
    "title",
    "description",
    "location",
    "is_virtual",
    "start_date",
    "end_date",
    "max_attendees",
    "tags",
    "image_url",
})


def _recount(session: Session, event_id: str) -> int:
    count = session.scalar(
        select(func.count())
        .select_from(EventAttendee)
        .where(
            EventAttendee.event_id == event_id,
            EventAttendee.status == AttendanceStatus.GOING,
        )
    ) or 0
    session.execute(update(Event).where(Event.id == event_id).values(attendee_count=count))
    return count


def get_events(engine: Engine) -> list[tuple[Event, User | None]]:
    """Every active event, latest start first, with its creator."""
    with Session(engine) as session:
        rows = session.execute(
            select(Event, User)
            .join(User, User.id == Event.creator_id, isouter=True)
            .where(Event.is_active.is_(True))
            .order_by(Event.start_date.desc())
        ).all()
        return [(e, u) for e, u in rows]


def get_user_events(engine: Engine, user_id: str) -> list[tuple[Event, User | None]]:
    """Events *user_id* created or is attending (going or maybe)."""
    attending = (
        select(EventAttendee.event_id)
        .where(
            EventAttendee.user_id == user_id,
            EventAttendee.status != AttendanceStatus.NOT_GOING,
        )
    )
    with Session(engine) as session:
        rows = session.execute(
            select(Event, User)
            .join(User, User.id == Event.creator_id, isouter=True)
            .where(or_(Event.creator_id == user_id, Event.id.in_(attending)))
            .order_by(Event.start_date.desc())
        ).all()
        return [(e, u) for e, u in rows]


def create_event(engine: Engine, creator_id: str, data: dict[str, Any]) -> Event:
    fields = {k: v for k, v in data.items() if k in _EVENT_FIELDS}
    with get_session(engine) as session:
        event = Event(creator_id=creator_id, **fields)
        session.add(event)
        session.flush()
        add_activity(
            session,
            user_id=creator_id,
            type=ActivityType.EVENT,
            title=f"Created event {event.title}",
            metadata={"event_id": event.id},
        )
        logger.info("Event %s created by %s", event.id, creator_id)
        return event


def join_event(
    engine: Engine, event_id: str, user_id: str, status: str = AttendanceStatus.GOING
) -> EventAttendee:
    """Record (or change) *user_id*'s answer for an event.

    Raises
    ------
    InvalidStateError
        Unknown status, inactive event, or the event is full.
    NotFoundError
        No such event.
    """
    if status not in set(AttendanceStatus):
        raise InvalidStateError("Invalid attendance status")

    with get_session(engine) as session:
        event = session.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event not found")
        if not event.is_active:
            raise InvalidStateError("Event is no longer active")

        row = session.scalar(
            select(EventAttendee).where(
                EventAttendee.event_id == event_id,
                EventAttendee.user_id == user_id,
            )
        )
        already_going = row is not None and row.status == AttendanceStatus.GOING
        if (
            status == AttendanceStatus.GOING
            and not already_going
            and event.max_attendees is not None
            and _recount(session, event_id) >= event.max_attendees
        ):
            raise InvalidStateError("Event is full")

        if row is None:
            row = EventAttendee(event_id=event_id, user_id=user_id, status=status)
            session.add(row)
        else:
            row.status = status
        session.flush()
        _recount(session, event_id)

        if status == AttendanceStatus.GOING and not already_going and event.creator_id != user_id:
            add_notification(
                session,
                user_id=event.creator_id,
                type=NotificationType.EVENT_JOIN,
                title="New attendee",
                message=f"Someone is going to {event.title}",
                related_id=event_id,
                related_type="event",
            )
        return row


def leave_event(engine: Engine, event_id: str, user_id: str) -> None:
    with get_session(engine) as session:
        if session.get(Event, event_id) is None:
            raise NotFoundError("Event not found")
        session.execute(
            delete(EventAttendee).where(
                EventAttendee.event_id == event_id,
                EventAttendee.user_id == user_id,
            )
        )
        _recount(session, event_id)


def get_event_attendees(engine: Engine, event_id: str) -> list[tuple[EventAttendee, User]]:
    with Session(engine) as session:
        rows = session.execute(
            select(EventAttendee, User)
            .join(User, User.id == EventAttendee.user_id)
            .where(EventAttendee.event_id == event_id)
            .order_by(EventAttendee.joined_at.asc())
        ).all()
        return [(a, u) for a, u in rows]
