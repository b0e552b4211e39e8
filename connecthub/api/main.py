"""
connecthub.api.main — FastAPI application entry point
======================================================

Run with::

    uvicorn connecthub.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from connecthub.api.deps import get_config, get_engine  # noqa: E402
from connecthub.api.rate_limit import configure_rate_limiter  # noqa: E402
from connecthub.api.routes.catalog import router as catalog_router  # noqa: E402
from connecthub.api.routes.connections import router as connections_router  # noqa: E402
from connecthub.api.routes.discovery import router as discovery_router  # noqa: E402
from connecthub.api.routes.events import router as events_router  # noqa: E402
from connecthub.api.routes.hobby_groups import mine_router as my_hobby_groups_router  # noqa: E402
from connecthub.api.routes.hobby_groups import router as hobby_groups_router  # noqa: E402
from connecthub.api.routes.messages import router as messages_router  # noqa: E402
from connecthub.api.routes.notifications import router as notifications_router  # noqa: E402
from connecthub.api.routes.users import router as users_router  # noqa: E402
from connecthub.database.engine import init_db  # noqa: E402
from connecthub.errors import (  # noqa: E402
    ConnectHubError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

# Domain exception → HTTP status
_ERROR_STATUS: dict[type[ConnectHubError], int] = {
    NotFoundError: 404,
    DuplicateError: 400,
    InvalidStateError: 400,
    PermissionDeniedError: 403,
}


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine, seed, arm the limiter."""
    engine = get_engine()
    cfg = get_config()
    init_db(engine, seed_catalog=cfg.seed_catalog)
    configure_rate_limiter(
        engine=engine,
        max_requests=cfg.mutation_rate_limit,
        window_seconds=cfg.mutation_window_seconds,
    )
    logger.info("%s API started — engine ready (%s)", cfg.app_name, engine.url.database)
    yield
    logger.info("%s API shutting down", cfg.app_name)


app = FastAPI(
    title="ConnectHub API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------
@app.exception_handler(ConnectHubError)
async def domain_error_handler(request: Request, exc: ConnectHubError):
    status_code = next(
        (code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 400
    )
    if isinstance(exc, DuplicateError):
        logger.warning("Rejected duplicate on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Mount routers
app.include_router(users_router, prefix="/api")
app.include_router(catalog_router, prefix="/api")
app.include_router(discovery_router, prefix="/api")
app.include_router(connections_router, prefix="/api")
app.include_router(messages_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(hobby_groups_router, prefix="/api")
app.include_router(my_hobby_groups_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
