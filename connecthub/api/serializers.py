"""
connecthub.api.serializers — ORM rows → JSON-ready dicts
=========================================================
"""

from __future__ import annotations

from datetime import datetime

from connecthub.database.models import (
    Activity,
    Connection,
    Event,
    EventAttendee,
    Group,
    Hobby,
    HobbyGroup,
    Interest,
    Message,
    Notification,
    Skill,
    User,
    UserHobby,
    UserSkill,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def user_summary(u: User | None) -> dict | None:
    """The public card shown next to messages, matches and memberships."""
    if u is None:
        return None
    return {
        "id": u.id,
        "display_name": u.display_name,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "profile_image_url": u.profile_image_url,
        "age_group": u.age_group,
        "is_bored": u.is_bored,
        "average_rating": u.average_rating,
        "total_ratings": u.total_ratings,
    }


def user_dict(u: User) -> dict:
    """Full profile.  Location is only included when the user shares it."""
    data = {
        **user_summary(u),
        "email": u.email,
        "bio": u.bio,
        "share_location": u.share_location,
        "created_at": _iso(u.created_at),
        "updated_at": _iso(u.updated_at),
    }
    if u.share_location:
        data["location_city"] = u.location_city
        data["location_state"] = u.location_state
        data["location_country"] = u.location_country
    return data


def self_dict(u: User) -> dict:
    """The caller's own profile, location always included."""
    return {
        **user_dict(u),
        "location_city": u.location_city,
        "location_state": u.location_state,
        "location_country": u.location_country,
    }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
def interest_dict(i: Interest) -> dict:
    return {
        "id": i.id,
        "name": i.name,
        "description": i.description,
        "icon": i.icon,
        "color": i.color,
        "member_count": i.member_count,
    }


def hobby_dict(h: Hobby) -> dict:
    return {
        "id": h.id,
        "name": h.name,
        "description": h.description,
        "category": h.category,
        "icon": h.icon,
        "color": h.color,
        "is_elderly_friendly": h.is_elderly_friendly,
        "difficulty_level": h.difficulty_level,
        "member_count": h.member_count,
    }


def user_hobby_dict(h: Hobby, uh: UserHobby) -> dict:
    return {
        **hobby_dict(h),
        "experience_level": uh.experience_level,
        "is_looking_for_partners": uh.is_looking_for_partners,
        "available_schedule": uh.available_schedule,
    }


def skill_dict(s: Skill) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "category": s.category,
        "description": s.description,
    }


def user_skill_dict(us: UserSkill, s: Skill) -> dict:
    return {
        "id": us.id,
        "skill": skill_dict(s),
        "level": us.level,
        "is_teaching": us.is_teaching,
        "is_learning": us.is_learning,
    }


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------
def connection_dict(c: Connection, other: User | None = None) -> dict:
    data = {
        "id": c.id,
        "requester_id": c.requester_id,
        "receiver_id": c.receiver_id,
        "status": c.status,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }
    if other is not None:
        data["user"] = user_summary(other)
    return data


def message_dict(m: Message, sender: User | None = None, receiver: User | None = None) -> dict:
    data = {
        "id": m.id,
        "sender_id": m.sender_id,
        "receiver_id": m.receiver_id,
        "content": m.content,
        "photo_url": m.photo_url,
        "is_read": m.is_read,
        "created_at": _iso(m.created_at),
    }
    if sender is not None:
        data["sender"] = user_summary(sender)
    if receiver is not None:
        data["receiver"] = user_summary(receiver)
    return data


def notification_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "related_id": n.related_id,
        "related_type": n.related_type,
        "is_read": n.is_read,
        "created_at": _iso(n.created_at),
    }


def activity_dict(a: Activity, author: User | None) -> dict:
    return {
        "id": a.id,
        "type": a.type,
        "title": a.title,
        "description": a.description,
        "metadata": a.metadata_,
        "is_public": a.is_public,
        "created_at": _iso(a.created_at),
        "user": user_summary(author),
    }


# ---------------------------------------------------------------------------
# Events & groups
# ---------------------------------------------------------------------------
def event_dict(e: Event, creator: User | None = None) -> dict:
    return {
        "id": e.id,
        "title": e.title,
        "description": e.description,
        "location": e.location,
        "is_virtual": e.is_virtual,
        "start_date": _iso(e.start_date),
        "end_date": _iso(e.end_date),
        "max_attendees": e.max_attendees,
        "attendee_count": e.attendee_count,
        "tags": e.tags or [],
        "image_url": e.image_url,
        "is_active": e.is_active,
        "creator_id": e.creator_id,
        "creator": user_summary(creator),
        "created_at": _iso(e.created_at),
    }


def attendee_dict(a: EventAttendee, u: User) -> dict:
    return {"status": a.status, "joined_at": _iso(a.joined_at), "user": user_summary(u)}


def group_dict(g: Group, creator: User | None = None) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "description": g.description,
        "image_url": g.image_url,
        "is_private": g.is_private,
        "member_count": g.member_count,
        "tags": g.tags or [],
        "creator_id": g.creator_id,
        "creator": user_summary(creator),
        "created_at": _iso(g.created_at),
    }


def hobby_group_dict(g: HobbyGroup) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "description": g.description,
        "hobby_id": g.hobby_id,
        "creator_id": g.creator_id,
        "location": g.location,
        "max_members": g.max_members,
        "current_members": g.current_members,
        "target_age_group": g.target_age_group,
        "meeting_schedule": g.meeting_schedule,
        "is_active": g.is_active,
        "image_url": g.image_url,
        "created_at": _iso(g.created_at),
    }
