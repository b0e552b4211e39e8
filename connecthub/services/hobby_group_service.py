"""
connecthub.services.hobby_group_service — Hobby meetup groups
==============================================================

Small, capped groups organised around one hobby.  The creator is the first
member (role ``organizer``), so a fresh group starts with
``current_members == 1``.  ``current_members`` is recomputed from
``hobby_group_members`` after every join and leave, so it always equals
the membership row count.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from connecthub.constants import ActivityType, HobbyGroupRole, NotificationType
from connecthub.database.engine import get_session
from connecthub.database.models import Hobby, HobbyGroup, HobbyGroupMember, User
from connecthub.errors import DuplicateError, InvalidStateError, NotFoundError
from connecthub.services.activity_service import add_activity
from connecthub.services.notification_service import add_notification

logger = logging.getLogger(__name__)

_HOBBY_GROUP_FIELDS = frozenset({
    "name",
    "description",
    "location",
    "max_members",
    "target_age_group",
    "meeting_schedule",
    "image_url",
})


def _recount(session: Session, group_id: str) -> int:
    count = session.scalar(
        select(func.count())
        .select_from(HobbyGroupMember)
        .where(HobbyGroupMember.group_id == group_id)
    ) or 0
    session.execute(
        update(HobbyGroup).where(HobbyGroup.id == group_id).values(current_members=count)
    )
    return count


def _is_member(engine: Engine, group_id: str, user_id: str) -> bool:
    with Session(engine) as session:
        return session.scalar(
            select(HobbyGroupMember.id).where(
                HobbyGroupMember.group_id == group_id,
                HobbyGroupMember.user_id == user_id,
            )
        ) is not None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_all_hobby_groups(engine: Engine) -> list[tuple[HobbyGroup, Hobby | None, User | None]]:
    """Active groups, newest first, as ``(group, hobby, creator)``."""
    with Session(engine) as session:
        rows = session.execute(
            select(HobbyGroup, Hobby, User)
            .join(Hobby, Hobby.id == HobbyGroup.hobby_id, isouter=True)
            .join(User, User.id == HobbyGroup.creator_id, isouter=True)
            .where(HobbyGroup.is_active.is_(True))
            .order_by(HobbyGroup.created_at.desc())
        ).all()
        return [(g, h, u) for g, h, u in rows]


def get_hobby_groups_by_hobby(engine: Engine, hobby_id: str) -> list[tuple[HobbyGroup, User | None]]:
    with Session(engine) as session:
        rows = session.execute(
            select(HobbyGroup, User)
            .join(User, User.id == HobbyGroup.creator_id, isouter=True)
            .where(HobbyGroup.hobby_id == hobby_id, HobbyGroup.is_active.is_(True))
            .order_by(HobbyGroup.created_at.desc())
        ).all()
        return [(g, u) for g, u in rows]


def get_user_hobby_groups(engine: Engine, user_id: str) -> list[tuple[HobbyGroup, Hobby | None, str]]:
    """Groups *user_id* belongs to as ``(group, hobby, role)``."""
    with Session(engine) as session:
        rows = session.execute(
            select(HobbyGroup, Hobby, HobbyGroupMember.role)
            .join(HobbyGroupMember, HobbyGroupMember.group_id == HobbyGroup.id)
            .join(Hobby, Hobby.id == HobbyGroup.hobby_id, isouter=True)
            .where(HobbyGroupMember.user_id == user_id)
            .order_by(HobbyGroupMember.joined_at.desc())
        ).all()
        return [(g, h, role or HobbyGroupRole.MEMBER) for g, h, role in rows]


def get_hobby_group_members(engine: Engine, group_id: str) -> list[tuple[HobbyGroupMember, User]]:
    with Session(engine) as session:
        rows = session.execute(
            select(HobbyGroupMember, User)
            .join(User, User.id == HobbyGroupMember.user_id)
            .where(HobbyGroupMember.group_id == group_id)
            .order_by(HobbyGroupMember.joined_at.asc())
        ).all()
        return [(m, u) for m, u in rows]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------
def create_hobby_group(engine: Engine, creator_id: str, data: dict[str, Any]) -> HobbyGroup:
    """Create a group around ``data["hobby_id"]`` with the creator as organizer."""
    hobby_id = data.get("hobby_id")
    fields = {k: v for k, v in data.items() if k in _HOBBY_GROUP_FIELDS and v is not None}
    with get_session(engine) as session:
        hobby = session.get(Hobby, hobby_id) if hobby_id else None
        if hobby is None:
            raise NotFoundError("Hobby not found")

        group = HobbyGroup(hobby_id=hobby_id, creator_id=creator_id, **fields)
        session.add(group)
        session.flush()
        session.add(HobbyGroupMember(
            group_id=group.id, user_id=creator_id, role=HobbyGroupRole.ORGANIZER,
        ))
        session.flush()
        _recount(session, group.id)
        add_activity(
            session,
            user_id=creator_id,
            type=ActivityType.HOBBY_GROUP,
            title=f"Started a {hobby.name} group: {group.name}",
            metadata={"hobby_group_id": group.id, "hobby_id": hobby_id},
        )
        logger.info("Hobby group %s created by %s", group.id, creator_id)
        return group


def join_hobby_group(engine: Engine, group_id: str, user_id: str) -> HobbyGroupMember:
    """Add *user_id* to a hobby group.

    Raises
    ------
    NotFoundError
        No such group, it is inactive, or the user has never signed in.
    DuplicateError
        Already a member.
    InvalidStateError
        The group is at ``max_members``.
    """
    try:
        with get_session(engine) as session:
            group = session.get(HobbyGroup, group_id)
            if group is None or not group.is_active:
                raise NotFoundError("Hobby group not found")
            joiner = session.get(User, user_id)
            if joiner is None:
                raise NotFoundError("User not found")
            existing = session.scalar(
                select(HobbyGroupMember.id).where(
                    HobbyGroupMember.group_id == group_id,
                    HobbyGroupMember.user_id == user_id,
                )
            )
            if existing is not None:
                raise DuplicateError("Already a member of this group")
            if _recount(session, group_id) >= group.max_members:
                raise InvalidStateError("This group is full")

            member = HobbyGroupMember(group_id=group_id, user_id=user_id, role=HobbyGroupRole.MEMBER)
            session.add(member)
            session.flush()
            _recount(session, group_id)

            if group.creator_id != user_id:
                name = joiner.display_name or joiner.first_name
                add_notification(
                    session,
                    user_id=group.creator_id,
                    type=NotificationType.HOBBY_GROUP_JOIN,
                    title="New group member",
                    message=f"{name or 'Someone'} joined {group.name}",
                    related_id=group_id,
                    related_type="hobby_group",
                )
    except IntegrityError as exc:
        if not _is_member(engine, group_id, user_id):
            raise
        raise DuplicateError("Already a member of this group") from exc

    logger.info("User %s joined hobby group %s", user_id, group_id)
    return member


def leave_hobby_group(engine: Engine, group_id: str, user_id: str) -> None:
    with get_session(engine) as session:
        if session.get(HobbyGroup, group_id) is None:
            raise NotFoundError("Hobby group not found")
        session.execute(
            delete(HobbyGroupMember).where(
                HobbyGroupMember.group_id == group_id,
                HobbyGroupMember.user_id == user_id,
            )
        )
        _recount(session, group_id)
    logger.info("User %s left hobby group %s", user_id, group_id)
