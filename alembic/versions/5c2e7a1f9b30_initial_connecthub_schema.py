"""Initial ConnectHub schema

Revision ID: 5c2e7a1f9b30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e7a1f9b30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def _user_fk(name: str = "user_id") -> sa.Column:
    return sa.Column(
        name, sa.String(255), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    """Create every ConnectHub table."""
    # -- users --------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(255), unique=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("profile_image_url", sa.String(500)),
        sa.Column("display_name", sa.String(100)),
        sa.Column("age_group", sa.String(10)),
        sa.Column("location_city", sa.String(100)),
        sa.Column("location_state", sa.String(100)),
        sa.Column("location_country", sa.String(100)),
        sa.Column("share_location", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bio", sa.Text()),
        sa.Column("is_bored", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
        _created_at("updated_at"),
    )
    op.create_index("ix_users_is_bored", "users", ["is_bored"])

    # -- catalog ------------------------------------------------------------
    op.create_table(
        "interests",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("icon", sa.String(50)),
        sa.Column("color", sa.String(20)),
        sa.Column("member_count", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_table(
        "hobbies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(50)),
        sa.Column("icon", sa.String(50)),
        sa.Column("color", sa.String(20)),
        sa.Column("is_elderly_friendly", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("difficulty_level", sa.String(20), nullable=False, server_default="easy"),
        sa.Column("member_count", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_table(
        "skills",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("category", sa.String(50)),
        sa.Column("description", sa.Text()),
        _created_at(),
    )

    # -- junctions ----------------------------------------------------------
    op.create_table(
        "user_interests",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk(),
        sa.Column(
            "interest_id", sa.String(36),
            sa.ForeignKey("interests.id", ondelete="CASCADE"), nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("user_id", "interest_id", name="uq_user_interests_user_interest"),
    )
    op.create_index("ix_user_interests_interest", "user_interests", ["interest_id"])

    op.create_table(
        "user_hobbies",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk(),
        sa.Column(
            "hobby_id", sa.String(36),
            sa.ForeignKey("hobbies.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("experience_level", sa.String(20), nullable=False, server_default="beginner"),
        sa.Column("is_looking_for_partners", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("available_schedule", JSONB()),
        _created_at(),
        sa.UniqueConstraint("user_id", "hobby_id", name="uq_user_hobbies_user_hobby"),
    )
    op.create_index("ix_user_hobbies_hobby", "user_hobbies", ["hobby_id"])

    op.create_table(
        "user_skills",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk(),
        sa.Column(
            "skill_id", sa.String(36),
            sa.ForeignKey("skills.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("level", sa.String(20), nullable=False, server_default="beginner"),
        sa.Column("is_teaching", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_learning", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),
    )

    # -- connections & messages ---------------------------------------------
    op.create_table(
        "connections",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk("requester_id"),
        _user_fk("receiver_id"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("pair_low", sa.String(255), nullable=False),
        sa.Column("pair_high", sa.String(255), nullable=False),
        _created_at(),
        _created_at("updated_at"),
        sa.UniqueConstraint("pair_low", "pair_high", name="uq_connections_pair"),
        sa.CheckConstraint("pair_low < pair_high", name="ck_connections_pair_order"),
    )
    op.create_index("ix_connections_receiver_status", "connections", ["receiver_id", "status"])
    op.create_index("ix_connections_requester_status", "connections", ["requester_id", "status"])

    op.create_table(
        "messages",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk("sender_id"),
        _user_fk("receiver_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("photo_url", sa.String(500)),
        _created_at(),
    )
    op.create_index("ix_messages_pair_time", "messages", ["sender_id", "receiver_id", "created_at"])
    op.create_index("ix_messages_receiver_unread", "messages", ["receiver_id", "is_read"])

    # -- feed ---------------------------------------------------------------
    op.create_table(
        "activities",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk(),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("metadata", JSONB()),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index("ix_activities_created_at", "activities", ["created_at"])
    op.create_index("ix_activities_user_time", "activities", ["user_id", "created_at"])

    # -- events & groups ----------------------------------------------------
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk("creator_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("location", sa.String(255)),
        sa.Column("is_virtual", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("max_attendees", sa.Integer()),
        sa.Column("tags", JSONB()),
        sa.Column("image_url", sa.String(500)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("attendee_count", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_creator", "events", ["creator_id"])

    op.create_table(
        "event_attendees",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "event_id", sa.String(36),
            sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk(),
        sa.Column("status", sa.String(20), nullable=False, server_default="going"),
        _created_at("joined_at"),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_attendees_event_user"),
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("image_url", sa.String(500)),
        _user_fk("creator_id"),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("member_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tags", JSONB()),
        _created_at(),
    )
    op.create_table(
        "group_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "group_id", sa.String(36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk(),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        _created_at("joined_at"),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )

    op.create_table(
        "hobby_groups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column(
            "hobby_id", sa.String(36),
            sa.ForeignKey("hobbies.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk("creator_id"),
        sa.Column("location", JSONB()),
        sa.Column("max_members", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("current_members", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("target_age_group", sa.String(10)),
        sa.Column("meeting_schedule", JSONB()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("image_url", sa.String(500)),
        _created_at(),
    )
    op.create_index("ix_hobby_groups_hobby_active", "hobby_groups", ["hobby_id", "is_active"])

    op.create_table(
        "hobby_group_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "group_id", sa.String(36),
            sa.ForeignKey("hobby_groups.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk(),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        _created_at("joined_at"),
        sa.UniqueConstraint("group_id", "user_id", name="uq_hobby_group_members_group_user"),
    )

    # -- notifications, ratings, limiter ------------------------------------
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk(),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text()),
        sa.Column("related_id", sa.String(255)),
        sa.Column("related_type", sa.String(50)),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_notifications_user_time", "notifications", ["user_id", "created_at"])

    op.create_table(
        "user_ratings",
        sa.Column("id", sa.String(36), primary_key=True),
        _user_fk("rater_id"),
        _user_fk("rated_user_id"),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("experience_type", sa.String(30), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("activity_context", sa.String(255)),
        _created_at(),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_user_ratings_range"),
    )
    op.create_index("ix_user_ratings_rated_user", "user_ratings", ["rated_user_id"])

    op.create_table(
        "rate_limit_events",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        _created_at("timestamp"),
    )
    op.create_index(
        "ix_rate_limit_user_ts",
        "rate_limit_events",
        ["user_id", sa.text("timestamp DESC")],
    )


def downgrade() -> None:
    """Drop every ConnectHub table."""
    for table in (
        "rate_limit_events",
        "user_ratings",
        "notifications",
        "hobby_group_members",
        "hobby_groups",
        "group_members",
        "groups",
        "event_attendees",
        "events",
        "activities",
        "messages",
        "connections",
        "user_skills",
        "user_hobbies",
        "user_interests",
        "skills",
        "hobbies",
        "interests",
        "users",
    ):
        op.drop_table(table)
