"""
connecthub.api.routes.events — Events and groups
=================================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import attendee_dict, event_dict, group_dict
from connecthub.constants import AttendanceStatus
from connecthub.services import event_service, group_service
from connecthub.services.user_service import Identity

router = APIRouter(tags=["events"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    location: str | None = None
    is_virtual: bool = False
    start_date: datetime
    end_date: datetime | None = None
    max_attendees: int | None = Field(default=None, ge=1)
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None


class AttendanceUpdate(BaseModel):
    status: AttendanceStatus = AttendanceStatus.GOING


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    image_url: str | None = None
    is_private: bool = False
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
@router.get("/events")
def list_events(user: CurrentUser, engine: EngineDep):
    return [event_dict(e, creator) for e, creator in event_service.get_events(engine)]


@router.get("/my-events")
def list_my_events(user: CurrentUser, engine: EngineDep):
    return [event_dict(e, creator) for e, creator in event_service.get_user_events(engine, user.user_id)]


@router.post("/events", status_code=201)
def create_event(
    body: EventCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    return event_dict(event_service.create_event(engine, user.user_id, body.model_dump()))


@router.post("/events/{event_id}/join")
def join_event(
    event_id: str,
    user: CurrentUser,
    engine: EngineDep,
    body: AttendanceUpdate | None = None,
):
    status = body.status if body is not None else AttendanceStatus.GOING
    row = event_service.join_event(engine, event_id, user.user_id, status)
    return {"event_id": row.event_id, "user_id": row.user_id, "status": row.status}


@router.delete("/events/{event_id}/leave")
def leave_event(event_id: str, user: CurrentUser, engine: EngineDep):
    event_service.leave_event(engine, event_id, user.user_id)
    return {"message": "Left event successfully"}


@router.get("/events/{event_id}/attendees")
def list_event_attendees(event_id: str, user: CurrentUser, engine: EngineDep):
    return [attendee_dict(a, u) for a, u in event_service.get_event_attendees(engine, event_id)]


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
@router.get("/groups")
def list_groups(user: CurrentUser, engine: EngineDep):
    return [group_dict(g, creator) for g, creator in group_service.get_groups(engine)]


@router.get("/my-groups")
def list_my_groups(user: CurrentUser, engine: EngineDep):
    return [
        {**group_dict(g, creator), "role": role}
        for g, creator, role in group_service.get_user_groups(engine, user.user_id)
    ]


@router.post("/groups", status_code=201)
def create_group(
    body: GroupCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    return group_dict(group_service.create_group(engine, user.user_id, body.model_dump()))


@router.post("/groups/{group_id}/join")
def join_group(group_id: str, user: CurrentUser, engine: EngineDep):
    row = group_service.join_group(engine, group_id, user.user_id)
    return {"group_id": row.group_id, "user_id": row.user_id, "role": row.role}


@router.delete("/groups/{group_id}/leave")
def leave_group(group_id: str, user: CurrentUser, engine: EngineDep):
    group_service.leave_group(engine, group_id, user.user_id)
    return {"message": "Left group successfully"}
