"""
connecthub.services.activity_service — Activity feed
=====================================================
"""

from __future__ import annotations

from sqlalchemy import Engine, or_, select
from sqlalchemy.orm import Session

from connecthub.database.engine import get_session
from connecthub.database.models import Activity, User


def add_activity(
    session: Session,
    *,
    user_id: str,
    type: str,
    title: str,
    description: str | None = None,
    metadata: dict | None = None,
    is_public: bool = True,
) -> Activity:
    """Queue a feed row on an open session (no commit)."""
    row = Activity(
        user_id=user_id,
        type=type,
        title=title,
        description=description,
        metadata_=metadata,
        is_public=is_public,
    )
    session.add(row)
    return row


def create_activity(engine: Engine, **fields) -> Activity:
    with get_session(engine) as session:
        row = add_activity(session, **fields)
        session.flush()
        return row


def get_activities(
    engine: Engine, user_id: str, limit: int = 50
) -> list[tuple[Activity, User | None]]:
    """Public activities plus *user_id*'s private ones, newest first.

    Each row is paired with its author (``None`` if the author row is gone).
    """
    with Session(engine) as session:
        rows = session.execute(
            select(Activity, User)
            .join(User, Activity.user_id == User.id, isouter=True)
            .where(or_(Activity.is_public.is_(True), Activity.user_id == user_id))
            .order_by(Activity.created_at.desc())
            .limit(limit)
        ).all()
        return [(a, u) for a, u in rows]
