"""
connecthub.api.routes.messages — Conversations and direct messages
===================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import message_dict, user_summary
from connecthub.services import message_service
from connecthub.services.user_service import Identity

router = APIRouter(tags=["messages"])


class MessageCreate(BaseModel):
    receiver_id: str
    content: str = Field(min_length=1, max_length=5000)
    photo_url: str | None = None


@router.get("/conversations")
def list_conversations(user: CurrentUser, engine: EngineDep):
    return [
        {
            "user": user_summary(c.user),
            "last_message": message_dict(c.last_message),
            "unread_count": c.unread_count,
        }
        for c in message_service.get_user_conversations(engine, user.user_id)
    ]


@router.get("/conversations/{other_user_id}")
def get_conversation(other_user_id: str, user: CurrentUser, engine: EngineDep):
    """The full thread with *other_user_id*; marks their messages read."""
    rows = message_service.get_conversation(engine, user.user_id, other_user_id)
    message_service.mark_messages_as_read(engine, user.user_id, other_user_id)
    return [message_dict(m, s, r) for m, s, r in rows]


@router.post("/messages", status_code=201)
def send_message(
    body: MessageCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    msg = message_service.create_message(
        engine, user.user_id, body.receiver_id, body.content, body.photo_url
    )
    return message_dict(msg)


@router.get("/messages/unread-count")
def unread_count(
    user: CurrentUser,
    engine: EngineDep,
    sender_id: str | None = Query(None),
):
    return {"count": message_service.get_unread_count(engine, user.user_id, sender_id)}
