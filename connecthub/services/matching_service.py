"""
connecthub.services.matching_service — Shared-interest discovery
=================================================================

Finds other users who hold at least one of the caller's interests (or
hobbies), ranked by how many they share.

The pipeline for both entity kinds:

    1. Load the caller's own id set.  Empty → empty result.
    2. Join users ↔ junction ↔ catalog, restricted to the caller's ids and
       excluding the caller, capped at ``limit × factor`` rows.
    3. Group the rows per candidate, collecting ``shared`` and ``all``.
    4. Keep candidates with ≥ 1 shared entity, sort by shared count
       (descending, stable on first appearance), truncate to ``limit``.

``all`` is collected from the same filtered join, so today it always
equals ``shared``.  It is kept as a separate field so clients can start
relying on it once it carries the candidate's full list.

The search variants return every user holding any of the requested ids,
grouped per user, unranked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from connecthub.constants import HOBBY_OVERFETCH_FACTOR, INTEREST_OVERFETCH_FACTOR
from connecthub.database.models import Hobby, Interest, User, UserHobby, UserInterest

E = TypeVar("E", Interest, Hobby)


@dataclass(slots=True)
class Match(Generic[E]):
    """A candidate user and the catalog entities linking them to the caller."""

    user: User
    shared: list[E] = field(default_factory=list)
    all: list[E] = field(default_factory=list)


@dataclass(slots=True)
class SearchHit(Generic[E]):
    """A user returned by an explicit multi-id search."""

    user: User
    entities: list[E] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Shared grouping pass
# ---------------------------------------------------------------------------
def _group_matches(rows, own_ids: set[str], limit: int) -> list[Match]:
    by_user: dict[str, Match] = {}
    for user, entity in rows:
        match = by_user.get(user.id)
        if match is None:
            match = by_user[user.id] = Match(user=user)
        if entity.id in own_ids:
            match.shared.append(entity)
        match.all.append(entity)

    ranked = [m for m in by_user.values() if m.shared]
    ranked.sort(key=lambda m: len(m.shared), reverse=True)
    return ranked[:limit]


def _group_hits(rows) -> list[SearchHit]:
    by_user: dict[str, SearchHit] = {}
    for user, entity in rows:
        hit = by_user.get(user.id)
        if hit is None:
            hit = by_user[user.id] = SearchHit(user=user)
        hit.entities.append(entity)
    return list(by_user.values())


# ---------------------------------------------------------------------------
# Interests
# ---------------------------------------------------------------------------
def get_users_with_shared_interests(
    engine: Engine, user_id: str, limit: int = 10
) -> list[Match[Interest]]:
    """Users sharing ≥ 1 interest with *user_id*, most shared first."""
    with Session(engine) as session:
        own_ids = set(session.scalars(
            select(UserInterest.interest_id).where(UserInterest.user_id == user_id)
        ).all())
        if not own_ids:
            return []

        rows = session.execute(
            select(User, Interest)
            .join(UserInterest, UserInterest.user_id == User.id)
            .join(Interest, Interest.id == UserInterest.interest_id)
            .where(User.id != user_id, UserInterest.interest_id.in_(own_ids))
            .limit(limit * INTEREST_OVERFETCH_FACTOR)
        ).all()
        return _group_matches(rows, own_ids, limit)


def search_users_by_interests(
    engine: Engine, interest_ids: list[str], exclude_user_id: str | None = None
) -> list[SearchHit[Interest]]:
    """Every user holding any of *interest_ids*, with the matching interests."""
    if not interest_ids:
        return []
    with Session(engine) as session:
        query = (
            select(User, Interest)
            .join(UserInterest, UserInterest.user_id == User.id)
            .join(Interest, Interest.id == UserInterest.interest_id)
            .where(UserInterest.interest_id.in_(interest_ids))
        )
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)
        return _group_hits(session.execute(query).all())


# ---------------------------------------------------------------------------
# Hobbies
# ---------------------------------------------------------------------------
def get_users_with_shared_hobbies(
    engine: Engine, user_id: str, limit: int = 10
) -> list[Match[Hobby]]:
    """Users sharing ≥ 1 hobby with *user_id*, most shared first."""
    with Session(engine) as session:
        own_ids = set(session.scalars(
            select(UserHobby.hobby_id).where(UserHobby.user_id == user_id)
        ).all())
        if not own_ids:
            return []

        rows = session.execute(
            select(User, Hobby)
            .join(UserHobby, UserHobby.user_id == User.id)
            .join(Hobby, Hobby.id == UserHobby.hobby_id)
            .where(User.id != user_id, UserHobby.hobby_id.in_(own_ids))
            .limit(limit * HOBBY_OVERFETCH_FACTOR)
        ).all()
        return _group_matches(rows, own_ids, limit)


def search_users_by_hobbies(
    engine: Engine, hobby_ids: list[str], exclude_user_id: str | None = None
) -> list[SearchHit[Hobby]]:
    """Every user holding any of *hobby_ids*, with the matching hobbies."""
    if not hobby_ids:
        return []
    with Session(engine) as session:
        query = (
            select(User, Hobby)
            .join(UserHobby, UserHobby.user_id == User.id)
            .join(Hobby, Hobby.id == UserHobby.hobby_id)
            .where(UserHobby.hobby_id.in_(hobby_ids))
        )
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)
        return _group_hits(session.execute(query).all())
