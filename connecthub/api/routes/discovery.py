"""
connecthub.api.routes.discovery — Shared-interest and shared-hobby matching
============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from connecthub.api.deps import ConfigDep, CurrentUser, EngineDep
from connecthub.api.serializers import hobby_dict, interest_dict, user_summary
from connecthub.services import matching_service

router = APIRouter(tags=["discovery"])


def _limit(requested: int | None, cfg) -> int:
    if requested is None:
        return cfg.discover_default_limit
    return max(1, min(requested, cfg.discover_max_limit))


# ---------------------------------------------------------------------------
# Interests
# ---------------------------------------------------------------------------
@router.get("/discover")
def discover(
    user: CurrentUser,
    engine: EngineDep,
    cfg: ConfigDep,
    limit: int | None = Query(None),
):
    """Users sharing the caller's interests, most shared first."""
    matches = matching_service.get_users_with_shared_interests(
        engine, user.user_id, _limit(limit, cfg)
    )
    return [
        {
            **user_summary(m.user),
            "shared_interests": [interest_dict(i) for i in m.shared],
            "all_interests": [interest_dict(i) for i in m.all],
        }
        for m in matches
    ]


@router.get("/search-users")
def search_users(
    user: CurrentUser,
    engine: EngineDep,
    interests: list[str] | None = Query(None),
):
    if not interests:
        raise HTTPException(400, "Interest IDs required")
    hits = matching_service.search_users_by_interests(engine, interests, user.user_id)
    return [
        {**user_summary(h.user), "interests": [interest_dict(i) for i in h.entities]}
        for h in hits
    ]


# ---------------------------------------------------------------------------
# Hobbies
# ---------------------------------------------------------------------------
@router.get("/discover-hobby-partners")
def discover_hobby_partners(
    user: CurrentUser,
    engine: EngineDep,
    cfg: ConfigDep,
    limit: int | None = Query(None),
):
    matches = matching_service.get_users_with_shared_hobbies(
        engine, user.user_id, _limit(limit, cfg)
    )
    return [
        {
            **user_summary(m.user),
            "shared_hobbies": [hobby_dict(h) for h in m.shared],
            "all_hobbies": [hobby_dict(h) for h in m.all],
        }
        for m in matches
    ]


@router.get("/search-hobby-users")
def search_hobby_users(
    user: CurrentUser,
    engine: EngineDep,
    hobbies: list[str] | None = Query(None),
):
    if not hobbies:
        raise HTTPException(400, "Hobby IDs required")
    hits = matching_service.search_users_by_hobbies(engine, hobbies, user.user_id)
    return [
        {**user_summary(h.user), "hobbies": [hobby_dict(x) for x in h.entities]}
        for h in hits
    ]
