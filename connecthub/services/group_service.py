"""
connecthub.services.group_service — Interest groups
====================================================
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.orm import Session

from connecthub.constants import ActivityType, GroupRole
from connecthub.database.engine import get_session, insert_once
from connecthub.database.models import Group, GroupMember, User
from connecthub.errors import NotFoundError
from connecthub.services.activity_service import add_activity

logger = logging.getLogger(__name__)

_GROUP_FIELDS = frozenset({"name", "description", "image_url", "is_private", "tags"})


def _recount(session: Session, group_id: str) -> int:
    count = session.scalar(
        select(func.count()).select_from(GroupMember).where(GroupMember.group_id == group_id)
    ) or 0
    session.execute(update(Group).where(Group.id == group_id).values(member_count=count))
    return count


def get_groups(engine: Engine) -> list[tuple[Group, User | None]]:
    with Session(engine) as session:
        rows = session.execute(
            select(Group, User)
            .join(User, User.id == Group.creator_id, isouter=True)
            .order_by(Group.created_at.desc())
        ).all()
        return [(g, u) for g, u in rows]


def get_user_groups(engine: Engine, user_id: str) -> list[tuple[Group, User | None, str]]:
    """Groups *user_id* belongs to as ``(group, creator, role)``."""
    with Session(engine) as session:
        rows = session.execute(
            select(Group, User, GroupMember.role)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .join(User, User.id == Group.creator_id, isouter=True)
            .where(GroupMember.user_id == user_id)
            .order_by(GroupMember.joined_at.desc())
        ).all()
        return [(g, u, role) for g, u, role in rows]


def create_group(engine: Engine, creator_id: str, data: dict[str, Any]) -> Group:
    """Create a group with its creator as the first admin."""
    fields = {k: v for k, v in data.items() if k in _GROUP_FIELDS}
    with get_session(engine) as session:
        group = Group(creator_id=creator_id, **fields)
        session.add(group)
        session.flush()
        session.add(GroupMember(group_id=group.id, user_id=creator_id, role=GroupRole.ADMIN))
        session.flush()
        _recount(session, group.id)
        add_activity(
            session,
            user_id=creator_id,
            type=ActivityType.GROUP,
            title=f"Started the group {group.name}",
            metadata={"group_id": group.id},
        )
        logger.info("Group %s created by %s", group.id, creator_id)
        return group


def join_group(engine: Engine, group_id: str, user_id: str) -> GroupMember:
    """Join a group (returns the existing membership if already a member)."""
    with get_session(engine) as session:
        if session.get(Group, group_id) is None:
            raise NotFoundError("Group not found")
        row, created = insert_once(
            session,
            GroupMember(group_id=group_id, user_id=user_id, role=GroupRole.MEMBER),
            select(GroupMember).where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            ),
        )
        _recount(session, group_id)
        if created:
            logger.info("User %s joined group %s", user_id, group_id)
        return row


def leave_group(engine: Engine, group_id: str, user_id: str) -> None:
    with get_session(engine) as session:
        if session.get(Group, group_id) is None:
            raise NotFoundError("Group not found")
        session.execute(
            delete(GroupMember).where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            )
        )
        _recount(session, group_id)
        logger.info("User %s left group %s", user_id, group_id)
