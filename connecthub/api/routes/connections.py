"""
connecthub.api.routes.connections — Connection requests
========================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from connecthub.api.deps import CurrentUser, EngineDep
from connecthub.api.rate_limit import rate_limited_user
from connecthub.api.serializers import connection_dict
from connecthub.constants import RESOLUTION_STATUSES, ConnectionStatus
from connecthub.services import connection_service
from connecthub.services.user_service import Identity

router = APIRouter(tags=["connections"])


class ConnectionCreate(BaseModel):
    receiver_id: str


class ConnectionUpdate(BaseModel):
    status: str


@router.get("/connections")
def list_connections(
    user: CurrentUser,
    engine: EngineDep,
    status: str = Query(ConnectionStatus.ACCEPTED.value),
):
    if status not in set(ConnectionStatus):
        raise HTTPException(400, "Invalid status")
    rows = connection_service.get_user_connections(engine, user.user_id, status)
    return [connection_dict(c, other) for c, other in rows]


@router.get("/connection-requests")
def list_connection_requests(user: CurrentUser, engine: EngineDep):
    rows = connection_service.get_pending_connection_requests(engine, user.user_id)
    return [connection_dict(c, requester) for c, requester in rows]


@router.post("/connections", status_code=201)
def request_connection(
    body: ConnectionCreate,
    engine: EngineDep,
    user: Identity = Depends(rate_limited_user),
):
    conn = connection_service.create_connection_request(engine, user.user_id, body.receiver_id)
    return connection_dict(conn)


@router.put("/connections/{connection_id}")
def respond_to_connection(
    connection_id: str,
    body: ConnectionUpdate,
    user: CurrentUser,
    engine: EngineDep,
):
    if body.status not in RESOLUTION_STATUSES:
        raise HTTPException(400, "Invalid status")
    conn = connection_service.update_connection_status(
        engine, connection_id, body.status, user.user_id
    )
    return connection_dict(conn)
