"""
connecthub.services.catalog_service — Interests, hobbies and skills
====================================================================

Catalog entities are shared, user-extensible taxonomies.  Anyone signed in
can add one; the only dedupe is the unique ``name`` column.

Junction writes (user ↔ interest / hobby / skill) are idempotent: a second
add of the same pair returns the existing row instead of creating a
duplicate.  Each add/remove recomputes the entity's ``member_count`` from
the junction table in the same transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import Engine, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from connecthub.constants import ActivityType
from connecthub.database.engine import get_session, insert_once
from connecthub.database.models import (
    Hobby,
    Interest,
    Skill,
    User,
    UserHobby,
    UserInterest,
    UserSkill,
)
from connecthub.errors import DuplicateError, NotFoundError
from connecthub.services.activity_service import add_activity

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _create_named(engine: Engine, row: T, kind: str) -> T:
    """Insert a catalog row, mapping a name clash to :class:`DuplicateError`."""
    try:
        with get_session(engine) as session:
            session.add(row)
            session.flush()
            return row
    except IntegrityError as exc:
        raise DuplicateError(f"{kind} already exists") from exc


def _catalog_fields(model: type, data: dict[str, Any]) -> dict[str, Any]:
    frozen = {"id", "created_at", "member_count"}
    columns = {c.key for c in model.__table__.columns}
    return {k: v for k, v in data.items() if k in columns and k not in frozen}


# ---------------------------------------------------------------------------
# Interests
# ---------------------------------------------------------------------------
def get_all_interests(engine: Engine) -> list[Interest]:
    with Session(engine) as session:
        return list(session.scalars(select(Interest).order_by(Interest.name.asc())).all())


def get_interests_by_user(engine: Engine, user_id: str) -> list[Interest]:
    with Session(engine) as session:
        return list(session.scalars(
            select(Interest)
            .join(UserInterest, UserInterest.interest_id == Interest.id)
            .where(UserInterest.user_id == user_id)
            .order_by(Interest.name.asc())
        ).all())


def create_interest(engine: Engine, data: dict[str, Any]) -> Interest:
    return _create_named(engine, Interest(**_catalog_fields(Interest, data)), "Interest")


def _recount_interest(session: Session, interest_id: str) -> int:
    count = session.scalar(
        select(func.count())
        .select_from(UserInterest)
        .where(UserInterest.interest_id == interest_id)
    ) or 0
    session.execute(
        update(Interest).where(Interest.id == interest_id).values(member_count=count)
    )
    return count


def update_interest_member_count(engine: Engine, interest_id: str) -> int:
    with get_session(engine) as session:
        return _recount_interest(session, interest_id)


def add_user_interest(engine: Engine, user_id: str, interest_id: str) -> UserInterest:
    """Attach an interest to a user (no-op if already attached)."""
    with get_session(engine) as session:
        interest = session.get(Interest, interest_id)
        if interest is None:
            raise NotFoundError("Interest not found")
        row, created = insert_once(
            session,
            UserInterest(user_id=user_id, interest_id=interest_id),
            select(UserInterest).where(
                UserInterest.user_id == user_id,
                UserInterest.interest_id == interest_id,
            ),
        )
        if created:
            add_activity(
                session,
                user_id=user_id,
                type=ActivityType.INTEREST,
                title=f"Added interest {interest.name}",
                metadata={"interest_id": interest_id},
            )
        _recount_interest(session, interest_id)
        return row


def remove_user_interest(engine: Engine, user_id: str, interest_id: str) -> None:
    with get_session(engine) as session:
        session.execute(
            delete(UserInterest).where(
                UserInterest.user_id == user_id,
                UserInterest.interest_id == interest_id,
            )
        )
        _recount_interest(session, interest_id)


@dataclass(slots=True)
class InterestGroup:
    """An interest viewed as a community of everyone who holds it."""

    interest: Interest
    member_count: int
    bored_members: int


def get_interest_groups(engine: Engine) -> list[InterestGroup]:
    """One pseudo-group per interest that has at least one member."""
    with Session(engine) as session:
        interests = session.scalars(
            select(Interest).where(Interest.member_count > 0).order_by(Interest.name.asc())
        ).all()
        bored = dict(session.execute(
            select(UserInterest.interest_id, func.count())
            .join(User, User.id == UserInterest.user_id)
            .where(User.is_bored.is_(True))
            .group_by(UserInterest.interest_id)
        ).all())
        return [
            InterestGroup(
                interest=i,
                member_count=i.member_count,
                bored_members=bored.get(i.id, 0),
            )
            for i in interests
        ]


# ---------------------------------------------------------------------------
# Hobbies
# ---------------------------------------------------------------------------
def get_all_hobbies(engine: Engine) -> list[Hobby]:
    with Session(engine) as session:
        return list(session.scalars(select(Hobby).order_by(Hobby.name.asc())).all())


def get_hobbies_by_user(engine: Engine, user_id: str) -> list[tuple[Hobby, UserHobby]]:
    """Each of the user's hobbies with its junction row (level, schedule …)."""
    with Session(engine) as session:
        rows = session.execute(
            select(Hobby, UserHobby)
            .join(UserHobby, UserHobby.hobby_id == Hobby.id)
            .where(UserHobby.user_id == user_id)
            .order_by(Hobby.name.asc())
        ).all()
        return [(h, uh) for h, uh in rows]


def create_hobby(engine: Engine, data: dict[str, Any]) -> Hobby:
    return _create_named(engine, Hobby(**_catalog_fields(Hobby, data)), "Hobby")


def _recount_hobby(session: Session, hobby_id: str) -> int:
    count = session.scalar(
        select(func.count())
        .select_from(UserHobby)
        .where(UserHobby.hobby_id == hobby_id)
    ) or 0
    session.execute(update(Hobby).where(Hobby.id == hobby_id).values(member_count=count))
    return count


def update_hobby_member_count(engine: Engine, hobby_id: str) -> int:
    with get_session(engine) as session:
        return _recount_hobby(session, hobby_id)


def add_user_hobby(
    engine: Engine,
    user_id: str,
    hobby_id: str,
    *,
    experience_level: str = "beginner",
    is_looking_for_partners: bool = True,
    available_schedule: dict | None = None,
) -> UserHobby:
    """Attach a hobby to a user (returns the existing row if already attached)."""
    with get_session(engine) as session:
        hobby = session.get(Hobby, hobby_id)
        if hobby is None:
            raise NotFoundError("Hobby not found")
        row, created = insert_once(
            session,
            UserHobby(
                user_id=user_id,
                hobby_id=hobby_id,
                experience_level=experience_level,
                is_looking_for_partners=is_looking_for_partners,
                available_schedule=available_schedule,
            ),
            select(UserHobby).where(
                UserHobby.user_id == user_id,
                UserHobby.hobby_id == hobby_id,
            ),
        )
        if created:
            add_activity(
                session,
                user_id=user_id,
                type=ActivityType.HOBBY,
                title=f"Picked up {hobby.name}",
                metadata={"hobby_id": hobby_id},
            )
        _recount_hobby(session, hobby_id)
        return row


def remove_user_hobby(engine: Engine, user_id: str, hobby_id: str) -> None:
    with get_session(engine) as session:
        session.execute(
            delete(UserHobby).where(
                UserHobby.user_id == user_id,
                UserHobby.hobby_id == hobby_id,
            )
        )
        _recount_hobby(session, hobby_id)


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
def get_skills(engine: Engine) -> list[Skill]:
    with Session(engine) as session:
        return list(session.scalars(select(Skill).order_by(Skill.name.asc())).all())


def get_user_skills(engine: Engine, user_id: str) -> list[tuple[UserSkill, Skill]]:
    with Session(engine) as session:
        rows = session.execute(
            select(UserSkill, Skill)
            .join(Skill, UserSkill.skill_id == Skill.id)
            .where(UserSkill.user_id == user_id)
            .order_by(Skill.name.asc())
        ).all()
        return [(us, s) for us, s in rows]


def create_skill(engine: Engine, data: dict[str, Any]) -> Skill:
    return _create_named(engine, Skill(**_catalog_fields(Skill, data)), "Skill")


def add_user_skill(
    engine: Engine,
    user_id: str,
    skill_id: str,
    *,
    level: str = "beginner",
    is_teaching: bool = False,
    is_learning: bool = False,
) -> UserSkill:
    """Attach a skill to a user (returns the existing row if already attached)."""
    with get_session(engine) as session:
        if session.get(Skill, skill_id) is None:
            raise NotFoundError("Skill not found")
        row, _ = insert_once(
            session,
            UserSkill(
                user_id=user_id,
                skill_id=skill_id,
                level=level,
                is_teaching=is_teaching,
                is_learning=is_learning,
            ),
            select(UserSkill).where(
                UserSkill.user_id == user_id,
                UserSkill.skill_id == skill_id,
            ),
        )
        return row


def _skill_holders(engine: Engine, flag) -> list[tuple[User, UserSkill, Skill]]:
    with Session(engine) as session:
        rows = session.execute(
            select(User, UserSkill, Skill)
            .join(UserSkill, UserSkill.user_id == User.id)
            .join(Skill, UserSkill.skill_id == Skill.id)
            .where(flag.is_(True))
            .order_by(Skill.name.asc(), User.display_name.asc())
        ).all()
        return [(u, us, s) for u, us, s in rows]


def get_skill_teachers(engine: Engine) -> list[tuple[User, UserSkill, Skill]]:
    return _skill_holders(engine, UserSkill.is_teaching)


def get_skill_learners(engine: Engine) -> list[tuple[User, UserSkill, Skill]]:
    return _skill_holders(engine, UserSkill.is_learning)
