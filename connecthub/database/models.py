"""
connecthub.database.models — SQLAlchemy 2.0 Data Models
========================================================

Tables:
- users               — Profiles (identity-provider ``sub`` as PK)
- interests           — Interest catalog
- user_interests      — User ↔ interest junction
- hobbies             — Hobby catalog
- user_hobbies        — User ↔ hobby junction with partner preferences
- skills              — Skill catalog
- user_skills         — User ↔ skill junction with teach/learn flags
- connections         — Connection requests (one row per unordered pair)
- messages            — Direct messages with read flag
- activities          — Append-only activity feed
- events              — User-created events
- event_attendees     — Event attendance junction
- groups              — Interest groups
- group_members       — Group membership junction
- hobby_groups        — Hobby meetup groups
- hobby_group_members — Hobby group membership junction
- notifications       — Append-only per-user notifications
- user_ratings        — Peer experience ratings
- rate_limit_events   — Sliding-window mutation throttle state

Every ``*_count`` / ``current_members`` column is a cache recomputed from
its junction table after each mutation.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from connecthub.constants import ConnectionStatus


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all ConnectHub ORM models."""


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, default=None)
    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    profile_image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    display_name: Mapped[str | None] = mapped_column(String(100), default=None)
    age_group: Mapped[str | None] = mapped_column(String(10), default=None)
    location_city: Mapped[str | None] = mapped_column(String(100), default=None)
    location_state: Mapped[str | None] = mapped_column(String(100), default=None)
    location_country: Mapped[str | None] = mapped_column(String(100), default=None)
    share_location: Mapped[bool] = mapped_column(Boolean, default=False)
    bio: Mapped[str | None] = mapped_column(Text, default=None)
    is_bored: Mapped[bool] = mapped_column(Boolean, default=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    __table_args__ = (
        Index("ix_users_is_bored", "is_bored"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id!r} name={self.display_name!r}>"


# ---------------------------------------------------------------------------
# Interests
# ---------------------------------------------------------------------------
class Interest(Base):
    __tablename__ = "interests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    icon: Mapped[str | None] = mapped_column(String(50), default=None)
    color: Mapped[str | None] = mapped_column(String(20), default=None)
    member_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Interest id={self.id} name={self.name!r}>"


class UserInterest(Base):
    __tablename__ = "user_interests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    interest_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("interests.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    user: Mapped[User] = relationship()
    interest: Mapped[Interest] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "interest_id", name="uq_user_interests_user_interest"),
        Index("ix_user_interests_interest", "interest_id"),
    )

    def __repr__(self) -> str:
        return f"<UserInterest user={self.user_id!r} interest={self.interest_id}>"


# ---------------------------------------------------------------------------
# Hobbies
# ---------------------------------------------------------------------------
class Hobby(Base):
    __tablename__ = "hobbies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    category: Mapped[str | None] = mapped_column(String(50), default=None)  # creative, physical, social, intellectual
    icon: Mapped[str | None] = mapped_column(String(50), default=None)
    color: Mapped[str | None] = mapped_column(String(20), default=None)
    is_elderly_friendly: Mapped[bool] = mapped_column(Boolean, default=True)
    difficulty_level: Mapped[str] = mapped_column(String(20), default="easy")
    member_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Hobby id={self.id} name={self.name!r}>"


class UserHobby(Base):
    __tablename__ = "user_hobbies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    hobby_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("hobbies.id", ondelete="CASCADE"), nullable=False
    )
    experience_level: Mapped[str] = mapped_column(String(20), default="beginner")
    is_looking_for_partners: Mapped[bool] = mapped_column(Boolean, default=True)
    # {"days": [...], "timePreference": "morning" | "afternoon" | "evening"}
    available_schedule: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    hobby: Mapped[Hobby] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "hobby_id", name="uq_user_hobbies_user_hobby"),
        Index("ix_user_hobbies_hobby", "hobby_id"),
    )

    def __repr__(self) -> str:
        return f"<UserHobby user={self.user_id!r} hobby={self.hobby_id}>"


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[str | None] = mapped_column(String(50), default=None)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Skill id={self.id} name={self.name!r}>"


class UserSkill(Base):
    __tablename__ = "user_skills"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    skill_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False
    )
    level: Mapped[str] = mapped_column(String(20), default="beginner")
    is_teaching: Mapped[bool] = mapped_column(Boolean, default=False)
    is_learning: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),
    )

    def __repr__(self) -> str:
        return f"<UserSkill user={self.user_id!r} skill={self.skill_id}>"


# ---------------------------------------------------------------------------
# Connections: one row per unordered user pair
# ---------------------------------------------------------------------------
class Connection(Base):
    """Directed connection request between two users.

    ``pair_low`` / ``pair_high`` hold the two user ids in sorted order so
    the unique constraint covers the pair regardless of who asked first.
    """
    __tablename__ = "connections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    requester_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ConnectionStatus.PENDING.value
    )
    pair_low: Mapped[str] = mapped_column(String(255), nullable=False)
    pair_high: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_connections_pair"),
        CheckConstraint("pair_low < pair_high", name="ck_connections_pair_order"),
        Index("ix_connections_receiver_status", "receiver_id", "status"),
        Index("ix_connections_requester_status", "requester_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Connection id={self.id} {self.requester_id!r}→{self.receiver_id!r} "
            f"status={self.status}>"
        )


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    sender_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    photo_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_messages_pair_time", "sender_id", "receiver_id", "created_at"),
        Index("ix_messages_receiver_unread", "receiver_id", "is_read"),
    )

    def __repr__(self) -> str:
        return f"<Message id={self.id} {self.sender_id!r}→{self.receiver_id!r}>"


# ---------------------------------------------------------------------------
# Activities: append-only feed
# ---------------------------------------------------------------------------
class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_activities_created_at", "created_at"),
        Index("ix_activities_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Activity id={self.id} user={self.user_id!r} type={self.type}>"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
class Event(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    creator_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    is_virtual: Mapped[bool] = mapped_column(Boolean, default=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    attendee_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    creator: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_events_start_date", "start_date"),
        Index("ix_events_creator", "creator_id"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id} title={self.title!r}>"


class EventAttendee(Base):
    __tablename__ = "event_attendees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), default="going")  # going, maybe, not_going
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_attendees_event_user"),
    )

    def __repr__(self) -> str:
        return f"<EventAttendee event={self.event_id} user={self.user_id!r} {self.status}>"


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
class Group(Base):
    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    creator_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)
    member_count: Mapped[int] = mapped_column(Integer, default=0)
    tags: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    creator: Mapped[User] = relationship()

    def __repr__(self) -> str:
        return f"<Group id={self.id} name={self.name!r}>"


class GroupMember(Base):
    __tablename__ = "group_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), default="member")  # admin, moderator, member
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )

    def __repr__(self) -> str:
        return f"<GroupMember group={self.group_id} user={self.user_id!r}>"


# ---------------------------------------------------------------------------
# Hobby groups
# ---------------------------------------------------------------------------
class HobbyGroup(Base):
    __tablename__ = "hobby_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    hobby_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("hobbies.id", ondelete="CASCADE"), nullable=False
    )
    creator_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # {"city": ..., "state": ..., "address": ..., "isVirtual": bool}
    location: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    max_members: Mapped[int] = mapped_column(Integer, default=10)
    current_members: Mapped[int] = mapped_column(Integer, default=1)
    target_age_group: Mapped[str | None] = mapped_column(String(10), default=None)
    # {"frequency": ..., "dayOfWeek": ..., "time": ...}
    meeting_schedule: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    image_url: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    hobby: Mapped[Hobby] = relationship()
    creator: Mapped[User] = relationship()

    __table_args__ = (
        Index("ix_hobby_groups_hobby_active", "hobby_id", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<HobbyGroup id={self.id} name={self.name!r}>"


class HobbyGroupMember(Base):
    __tablename__ = "hobby_group_members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("hobby_groups.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), default="member")
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_hobby_group_members_group_user"),
    )

    def __repr__(self) -> str:
        return f"<HobbyGroupMember group={self.group_id} user={self.user_id!r}>"


# ---------------------------------------------------------------------------
# Notifications: append-only
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, default=None)
    related_id: Mapped[str | None] = mapped_column(String(255), default=None)
    related_type: Mapped[str | None] = mapped_column(String(50), default=None)  # event, user, group
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_notifications_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification id={self.id} user={self.user_id!r} type={self.type}>"


# ---------------------------------------------------------------------------
# UserRating: peer experience ratings
# ---------------------------------------------------------------------------
class UserRating(Base):
    __tablename__ = "user_ratings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    rater_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rated_user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    experience_type: Mapped[str] = mapped_column(String(30), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, default=None)
    activity_context: Mapped[str | None] = mapped_column(String(255), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_user_ratings_range"),
        Index("ix_user_ratings_rated_user", "rated_user_id"),
    )

    def __repr__(self) -> str:
        return f"<UserRating rater={self.rater_id!r} rated={self.rated_user_id!r} {self.rating}>"


# ---------------------------------------------------------------------------
# RateLimitEvent: durable mutation events for per-user throttling
# ---------------------------------------------------------------------------
class RateLimitEvent(Base):
    __tablename__ = "rate_limit_events"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_rate_limit_user_ts", "user_id", timestamp.desc()),
    )

    def __repr__(self) -> str:
        return f"<RateLimitEvent user={self.user_id!r} ts={self.timestamp}>"
