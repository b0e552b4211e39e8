"""
connecthub.api.routes.catalog — Interests, hobbies, skills
===========================================================

Catalog listings are public; creating entries and editing your own
junction rows require sign-in.  Creating a catalog entry counts against
the mutation rate limit.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import (
    hobby_dict,
    interest_dict,
    skill_dict,
    user_hobby_dict,
    user_skill_dict,
    user_summary,
)
from connecthub.constants import DIFFICULTY_LEVELS, EXPERIENCE_LEVELS, SKILL_LEVELS
from connecthub.services import catalog_service
from connecthub.services.user_service import Identity

router = APIRouter(tags=["catalog"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class InterestCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    icon: str | None = None
    color: str | None = None


class UserInterestCreate(BaseModel):
    interest_id: str


class HobbyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    category: str | None = None
    icon: str | None = None
    color: str | None = None
    is_elderly_friendly: bool = True
    difficulty_level: str = "easy"


class UserHobbyCreate(BaseModel):
    hobby_id: str
    experience_level: str = "beginner"
    is_looking_for_partners: bool = True
    available_schedule: dict | None = None


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category: str | None = None
    description: str | None = None


class UserSkillCreate(BaseModel):
    skill_id: str
    level: str = "beginner"
    is_teaching: bool = False
    is_learning: bool = False


# ---------------------------------------------------------------------------
# Interests
# ---------------------------------------------------------------------------
@router.get("/interests")
def list_interests(engine: EngineDep):
    return [interest_dict(i) for i in catalog_service.get_all_interests(engine)]


@router.post("/interests", status_code=201)
def create_interest(
    body: InterestCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    return interest_dict(catalog_service.create_interest(engine, body.model_dump()))


@router.post("/user-interests", status_code=201)
def add_user_interest(body: UserInterestCreate, user: CurrentUser, engine: EngineDep):
    row = catalog_service.add_user_interest(engine, user.user_id, body.interest_id)
    return {"id": row.id, "user_id": row.user_id, "interest_id": row.interest_id}


@router.delete("/user-interests/{interest_id}")
def remove_user_interest(interest_id: str, user: CurrentUser, engine: EngineDep):
    catalog_service.remove_user_interest(engine, user.user_id, interest_id)
    return {"message": "Interest removed successfully"}


@router.get("/interest-groups")
def list_interest_groups(user: CurrentUser, engine: EngineDep):
    """Every held interest as a community, with its bored-member count."""
    return [
        {
            "id": g.interest.id,
            "name": f"{g.interest.name} Enthusiasts",
            "description": (
                f"Connect with other {g.interest.name.lower()} lovers"
                " and discover new activities together"
            ),
            "interest": interest_dict(g.interest),
            "member_count": g.member_count,
            "bored_members": g.bored_members,
        }
        for g in catalog_service.get_interest_groups(engine)
    ]


# ---------------------------------------------------------------------------
# Hobbies
# ---------------------------------------------------------------------------
@router.get("/hobbies")
def list_hobbies(engine: EngineDep):
    return [hobby_dict(h) for h in catalog_service.get_all_hobbies(engine)]


@router.post("/hobbies", status_code=201)
def create_hobby(
    body: HobbyCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    if body.difficulty_level not in DIFFICULTY_LEVELS:
        raise HTTPException(400, "Invalid difficulty level")
    return hobby_dict(catalog_service.create_hobby(engine, body.model_dump()))


@router.get("/my-hobbies")
def list_my_hobbies(user: CurrentUser, engine: EngineDep):
    return [user_hobby_dict(h, uh) for h, uh in catalog_service.get_hobbies_by_user(engine, user.user_id)]


@router.post("/user-hobbies", status_code=201)
def add_user_hobby(body: UserHobbyCreate, user: CurrentUser, engine: EngineDep):
    if body.experience_level not in EXPERIENCE_LEVELS:
        raise HTTPException(400, "Invalid experience level")
    row = catalog_service.add_user_hobby(
        engine,
        user.user_id,
        body.hobby_id,
        experience_level=body.experience_level,
        is_looking_for_partners=body.is_looking_for_partners,
        available_schedule=body.available_schedule,
    )
    return {
        "id": row.id,
        "user_id": row.user_id,
        "hobby_id": row.hobby_id,
        "experience_level": row.experience_level,
        "is_looking_for_partners": row.is_looking_for_partners,
        "available_schedule": row.available_schedule,
    }


@router.delete("/user-hobbies/{hobby_id}")
def remove_user_hobby(hobby_id: str, user: CurrentUser, engine: EngineDep):
    catalog_service.remove_user_hobby(engine, user.user_id, hobby_id)
    return {"message": "Hobby removed successfully"}


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
@router.get("/skills")
def list_skills(user: CurrentUser, engine: EngineDep):
    return [skill_dict(s) for s in catalog_service.get_skills(engine)]


@router.post("/skills", status_code=201)
def create_skill(
    body: SkillCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    return skill_dict(catalog_service.create_skill(engine, body.model_dump()))


@router.get("/my-skills")
def list_my_skills(user: CurrentUser, engine: EngineDep):
    return [user_skill_dict(us, s) for us, s in catalog_service.get_user_skills(engine, user.user_id)]


@router.post("/user-skills", status_code=201)
def add_user_skill(body: UserSkillCreate, user: CurrentUser, engine: EngineDep):
    if body.level not in SKILL_LEVELS:
        raise HTTPException(400, "Invalid skill level")
    row = catalog_service.add_user_skill(
        engine,
        user.user_id,
        body.skill_id,
        level=body.level,
        is_teaching=body.is_teaching,
        is_learning=body.is_learning,
    )
    return {
        "id": row.id,
        "skill_id": row.skill_id,
        "level": row.level,
        "is_teaching": row.is_teaching,
        "is_learning": row.is_learning,
    }


def _holder_dicts(rows) -> list[dict]:
    return [{**user_skill_dict(us, s), "user": user_summary(u)} for u, us, s in rows]


@router.get("/skill-teachers")
def list_skill_teachers(user: CurrentUser, engine: EngineDep):
    return _holder_dicts(catalog_service.get_skill_teachers(engine))


@router.get("/skill-learners")
def list_skill_learners(user: CurrentUser, engine: EngineDep):
    return _holder_dicts(catalog_service.get_skill_learners(engine))
