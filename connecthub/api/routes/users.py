"""
connecthub.api.routes.users — Sign-in sync, profiles, bored flag, ratings
==========================================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, StringConstraints

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import interest_dict, self_dict, user_dict, user_summary
from connecthub.constants import AGE_GROUPS
from connecthub.services import catalog_service, user_service
from connecthub.services.user_service import Identity

router = APIRouter(tags=["users"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ProfileUpdate(BaseModel):
    display_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    bio: str | None = None
    age_group: str | None = None
    location_city: str | None = None
    location_state: str | None = None
    location_country: str | None = None
    share_location: bool | None = None


class BoredStatus(BaseModel):
    is_bored: bool


class RatingCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    experience_type: str
    comment: str | None = None
    activity_context: str | None = None


# ---------------------------------------------------------------------------
# /auth/user
# ---------------------------------------------------------------------------
@router.get("/auth/user")
def get_auth_user(user: CurrentUser, engine: EngineDep):
    """The signed-in user's profile and interests."""
    row = user_service.get_user(engine, user.user_id)
    if row is None:
        raise HTTPException(404, "User not found")
    return {
        **self_dict(row),
        "interests": [interest_dict(i) for i in catalog_service.get_interests_by_user(engine, user.user_id)],
    }


@router.post("/auth/user")
def sync_auth_user(user: CurrentUser, engine: EngineDep):
    """Create or refresh the caller's row from the token claims."""
    return self_dict(user_service.upsert_user(engine, user))


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------
@router.put("/profile")
def update_profile(body: ProfileUpdate, user: CurrentUser, engine: EngineDep):
    if body.age_group is not None and body.age_group not in AGE_GROUPS:
        raise HTTPException(400, "Invalid age group")
    data = body.model_dump(exclude_none=True)
    return self_dict(user_service.update_user_profile(engine, user.user_id, data))


@router.get("/users/{user_id}")
def get_public_profile(user_id: str, user: CurrentUser, engine: EngineDep):
    row = user_service.get_user(engine, user_id)
    if row is None:
        raise HTTPException(404, "User not found")
    return {
        **user_dict(row),
        "interests": [interest_dict(i) for i in catalog_service.get_interests_by_user(engine, user_id)],
    }


@router.post("/users/{user_id}/ratings", status_code=201)
def rate_user(
    user_id: str,
    body: RatingCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    rated = user_service.rate_user(
        engine,
        rater_id=user.user_id,
        rated_user_id=user_id,
        rating=body.rating,
        experience_type=body.experience_type,
        comment=body.comment,
        activity_context=body.activity_context,
    )
    return {
        "user_id": rated.id,
        "average_rating": rated.average_rating,
        "total_ratings": rated.total_ratings,
    }


# ---------------------------------------------------------------------------
# Bored flag
# ---------------------------------------------------------------------------
@router.get("/bored-users")
def list_bored_users(
    user: CurrentUser,
    engine: EngineDep,
    limit: int = Query(20, ge=1, le=100),
):
    return [user_summary(u) for u in user_service.get_bored_users(engine, user.user_id, limit)]


@router.post("/user-bored-status")
def set_bored_status(body: BoredStatus, user: CurrentUser, engine: EngineDep):
    row = user_service.update_bored_status(engine, user.user_id, body.is_bored)
    return {
        "success": True,
        "message": "User marked as bored" if row.is_bored else "User no longer bored",
        "is_bored": row.is_bored,
    }
