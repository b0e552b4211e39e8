"""
connecthub.api.routes.hobby_groups — Hobby meetup groups
=========================================================

Listings and member rosters are public; creating, joining and leaving
require sign-in.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import hobby_dict, hobby_group_dict, user_summary
from connecthub.services import hobby_group_service
from connecthub.services.user_service import Identity

router = APIRouter(prefix="/hobby-groups", tags=["hobby-groups"])
mine_router = APIRouter(tags=["hobby-groups"])


class HobbyGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    hobby_id: str
    description: str | None = None
    location: dict | None = None
    max_members: int = Field(default=10, ge=2, le=500)
    target_age_group: str | None = None
    meeting_schedule: dict | None = None
    image_url: str | None = None


@router.get("")
def list_hobby_groups(engine: EngineDep):
    return [
        {
            **hobby_group_dict(g),
            "hobby": hobby_dict(h) if h else None,
            "creator": user_summary(creator),
            "member_count": g.current_members,
        }
        for g, h, creator in hobby_group_service.get_all_hobby_groups(engine)
    ]


@router.get("/hobby/{hobby_id}")
def list_hobby_groups_for_hobby(hobby_id: str, engine: EngineDep):
    return [
        {**hobby_group_dict(g), "creator": user_summary(creator), "member_count": g.current_members}
        for g, creator in hobby_group_service.get_hobby_groups_by_hobby(engine, hobby_id)
    ]


@router.post("", status_code=201)
def create_hobby_group(
    body: HobbyGroupCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    group = hobby_group_service.create_hobby_group(engine, user.user_id, body.model_dump())
    return hobby_group_dict(group)


@router.post("/{group_id}/join", status_code=201)
def join_hobby_group(group_id: str, user: CurrentUser, engine: EngineDep):
    row = hobby_group_service.join_hobby_group(engine, group_id, user.user_id)
    return {"group_id": row.group_id, "user_id": row.user_id, "role": row.role}


@router.delete("/{group_id}/leave")
def leave_hobby_group(group_id: str, user: CurrentUser, engine: EngineDep):
    hobby_group_service.leave_hobby_group(engine, group_id, user.user_id)
    return {"message": "Left hobby group successfully"}


@router.get("/{group_id}/members")
def list_hobby_group_members(group_id: str, engine: EngineDep):
    return [
        {"role": m.role, "joined_at": m.joined_at.isoformat() if m.joined_at else None, "user": user_summary(u)}
        for m, u in hobby_group_service.get_hobby_group_members(engine, group_id)
    ]


@mine_router.get("/my-hobby-groups")
def list_my_hobby_groups(user: CurrentUser, engine: EngineDep):
    return [
        {**hobby_group_dict(g), "hobby": hobby_dict(h) if h else None, "role": role}
        for g, h, role in hobby_group_service.get_user_hobby_groups(engine, user.user_id)
    ]
