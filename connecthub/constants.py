"""
connecthub.constants — Shared Constants
========================================

Single source of truth for the enumerated values accepted by the API and
the fetch bounds used by the matching queries.  Import from here instead
of repeating literals in routes and services.
"""

from __future__ import annotations

import enum


class ConnectionStatus(enum.StrEnum):
    """Lifecycle of a connection request: pending → accepted | declined."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


# Statuses a receiver may resolve a pending request to
RESOLUTION_STATUSES: frozenset[str] = frozenset({
    ConnectionStatus.ACCEPTED,
    ConnectionStatus.DECLINED,
})


class AttendanceStatus(enum.StrEnum):
    GOING = "going"
    MAYBE = "maybe"
    NOT_GOING = "not_going"


class GroupRole(enum.StrEnum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"


class HobbyGroupRole(enum.StrEnum):
    MEMBER = "member"
    ORGANIZER = "organizer"
    CO_ORGANIZER = "co-organizer"


class ActivityType(enum.StrEnum):
    """Kinds of rows written to the activity feed."""
    CONNECTION = "connection"
    INTEREST = "interest"
    HOBBY = "hobby"
    EVENT = "event"
    GROUP = "group"
    HOBBY_GROUP = "hobby_group"


class NotificationType(enum.StrEnum):
    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    MESSAGE = "message"
    EVENT_JOIN = "event_join"
    HOBBY_GROUP_JOIN = "hobby_group_join"


AGE_GROUPS: tuple[str, ...] = ("18-25", "26-35", "36-45", "46-55", "56-65", "65+")
EXPERIENCE_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")
SKILL_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced", "expert")
DIFFICULTY_LEVELS: tuple[str, ...] = ("easy", "moderate", "challenging")
RATING_EXPERIENCE_TYPES: tuple[str, ...] = (
    "event_attendance", "reliability", "communication", "safety",
)

# ---------------------------------------------------------------------------
# Matching fetch bounds
# ---------------------------------------------------------------------------
# The join is capped at ``limit * factor`` rows before grouping so one
# popular interest cannot make the query unbounded.
INTEREST_OVERFETCH_FACTOR = 10
HOBBY_OVERFETCH_FACTOR = 3
