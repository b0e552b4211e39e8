"""
connecthub.services.user_service — Profiles, bored flag and ratings
====================================================================

Users are created on first sign-in via :func:`upsert_user` and are never
hard-deleted here.  Rating aggregates on ``users`` are recomputed from
``user_ratings`` after each new rating.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from connecthub.constants import RATING_EXPERIENCE_TYPES
from connecthub.database.engine import get_session
from connecthub.database.models import User, UserRating
from connecthub.errors import InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

# Columns a profile edit may touch
PROFILE_FIELDS: frozenset[str] = frozenset({
    "display_name",
    "first_name",
    "last_name",
    "profile_image_url",
    "age_group",
    "location_city",
    "location_state",
    "location_country",
    "share_location",
    "bio",
})


@dataclass(frozen=True, slots=True)
class Identity:
    """The caller, as asserted by the identity provider's token."""

    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None


def get_user(engine: Engine, user_id: str) -> User | None:
    with Session(engine) as session:
        return session.get(User, user_id)


def upsert_user(engine: Engine, identity: Identity) -> User:
    """Insert the caller on first sign-in, refresh provider fields after."""
    with get_session(engine) as session:
        user = session.get(User, identity.user_id)
        if user is None:
            user = User(id=identity.user_id)
            session.add(user)
            logger.info("New user %s signed in", identity.user_id)
        user.email = identity.email
        user.first_name = identity.first_name
        user.last_name = identity.last_name
        user.profile_image_url = identity.profile_image_url
        if not user.display_name:
            full = " ".join(p for p in (identity.first_name, identity.last_name) if p)
            user.display_name = full or None
        user.updated_at = datetime.now(UTC)
        session.flush()
        return user


def update_user_profile(engine: Engine, user_id: str, profile: dict[str, Any]) -> User:
    """Apply a profile edit.  Keys outside :data:`PROFILE_FIELDS` are ignored.

    Raises
    ------
    NotFoundError
        If the user has not signed in yet.
    """
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        for key, value in profile.items():
            if key in PROFILE_FIELDS:
                setattr(user, key, value)
        user.updated_at = datetime.now(UTC)
        session.flush()
        return user


# ---------------------------------------------------------------------------
# Bored status
# ---------------------------------------------------------------------------
def update_bored_status(engine: Engine, user_id: str, is_bored: bool) -> User:
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.is_bored = is_bored
        session.flush()
        return user


def get_bored_users(engine: Engine, exclude_user_id: str, limit: int = 20) -> list[User]:
    """Users currently flagged bored, the caller excluded, most recently updated first."""
    with Session(engine) as session:
        return list(session.scalars(
            select(User)
            .where(User.is_bored.is_(True), User.id != exclude_user_id)
            .order_by(User.updated_at.desc())
            .limit(limit)
        ).all())


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------
def rate_user(
    engine: Engine,
    *,
    rater_id: str,
    rated_user_id: str,
    rating: int,
    experience_type: str,
    comment: str | None = None,
    activity_context: str | None = None,
) -> User:
    """Record a rating and recompute the rated user's aggregates.

    Returns the rated user with fresh ``average_rating`` / ``total_ratings``.
    """
    if rater_id == rated_user_id:
        raise InvalidStateError("You cannot rate yourself")
    if not 1 <= rating <= 5:
        raise InvalidStateError("Rating must be between 1 and 5")
    if experience_type not in RATING_EXPERIENCE_TYPES:
        raise InvalidStateError("Invalid experience type")

    with get_session(engine) as session:
        rated = session.get(User, rated_user_id)
        if rated is None:
            raise NotFoundError("User not found")
        session.add(UserRating(
            rater_id=rater_id,
            rated_user_id=rated_user_id,
            rating=rating,
            experience_type=experience_type,
            comment=comment,
            activity_context=activity_context,
        ))
        session.flush()

        avg, total = session.execute(
            select(func.avg(UserRating.rating), func.count())
            .where(UserRating.rated_user_id == rated_user_id)
        ).one()
        rated.average_rating = round(float(avg or 0.0), 2)
        rated.total_ratings = int(total or 0)
        session.flush()
        return rated
