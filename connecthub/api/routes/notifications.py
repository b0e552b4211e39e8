"""
connecthub.api.routes.notifications — Notifications and the activity feed
==========================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from connecthub.api.deps import ConfigDep, CurrentUser, EngineDep
from connecthub.api.serializers import activity_dict, notification_dict
from connecthub.services import activity_service, notification_service

router = APIRouter(tags=["notifications"])


@router.get("/notifications")
def list_notifications(user: CurrentUser, engine: EngineDep):
    return [notification_dict(n) for n in notification_service.get_notifications(engine, user.user_id)]


@router.get("/notifications/unread-count")
def unread_notification_count(user: CurrentUser, engine: EngineDep):
    return {"count": notification_service.get_unread_notification_count(engine, user.user_id)}


@router.patch("/notifications/{notification_id}/read")
def mark_read(notification_id: str, user: CurrentUser, engine: EngineDep):
    notification_service.mark_notification_as_read(engine, notification_id, user.user_id)
    return {"message": "Notification marked as read"}


@router.post("/notifications/read-all")
def mark_all_read(user: CurrentUser, engine: EngineDep):
    updated = notification_service.mark_all_notifications_as_read(engine, user.user_id)
    return {"updated": updated}


@router.get("/activities")
def list_activities(user: CurrentUser, engine: EngineDep, cfg: ConfigDep):
    rows = activity_service.get_activities(engine, user.user_id, cfg.feed_limit)
    return [activity_dict(a, author) for a, author in rows]
