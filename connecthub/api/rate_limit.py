"""
connecthub.api.rate_limit — Per-User Mutation Rate Limiting
============================================================

Throttles the endpoints that create content (connection requests,
messages, catalog entries, events, groups, ratings).  Defaults to 30
mutations per 60-second sliding window per user; both numbers come from
``config.yaml``.

State lives in the ``rate_limit_events`` table so limits survive restarts
and are shared by every API worker.  Returns HTTP 429 with a
``Retry-After`` header when the limit is exceeded.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import Engine, delete, func, select
from sqlalchemy.orm import Session

from connecthub.api.deps import get_current_user
from connecthub.database.models import RateLimitEvent
from connecthub.services.user_service import Identity

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60

# HTTP methods considered "mutations"
_MUTATION_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class MutationRateLimiter:
    """Sliding-window rate limiter keyed by user id."""

    def __init__(
        self,
        max_requests: int = DEFAULT_RATE_LIMIT,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        *,
        engine: Engine,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.engine = engine

    def _normalize_dt(self, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def _prune(self, session: Session, user_id: str, cutoff: datetime) -> None:
        session.execute(
            delete(RateLimitEvent).where(
                RateLimitEvent.user_id == user_id,
                RateLimitEvent.timestamp < cutoff,
            )
        )

    def check(self, user_id: str) -> tuple[bool, dict[str, Any]]:
        """Return ``(allowed, info)``.

        ``info`` carries ``remaining``, ``reset`` (seconds until the oldest
        request in the window expires) and ``limit``.
        """
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            timestamps = session.scalars(
                select(RateLimitEvent.timestamp)
                .where(RateLimitEvent.user_id == user_id)
                .order_by(RateLimitEvent.timestamp.asc())
            ).all()
            session.commit()

        count = len(timestamps)
        if count >= self.max_requests:
            oldest = self._normalize_dt(timestamps[0])
            reset = (oldest + timedelta(seconds=self.window_seconds) - now).total_seconds()
            return False, {
                "remaining": 0,
                "reset": max(1, int(reset) + 1),
                "limit": self.max_requests,
            }

        return True, {
            "remaining": self.max_requests - count,
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def record(self, user_id: str) -> dict[str, Any]:
        """Record one mutation and return the updated info dict."""
        now = datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.window_seconds)

        with Session(self.engine) as session:
            self._prune(session, user_id, cutoff)
            session.add(RateLimitEvent(user_id=user_id, timestamp=now))
            session.flush()
            count = session.scalar(
                select(func.count())
                .select_from(RateLimitEvent)
                .where(RateLimitEvent.user_id == user_id)
            ) or 0
            session.commit()

        return {
            "remaining": max(0, self.max_requests - count),
            "reset": self.window_seconds,
            "limit": self.max_requests,
        }

    def reset(self, user_id: str | None = None) -> None:
        """Clear limiter state for one user, or for everyone."""
        with Session(self.engine) as session:
            if user_id is None:
                session.execute(delete(RateLimitEvent))
            else:
                session.execute(delete(RateLimitEvent).where(RateLimitEvent.user_id == user_id))
            session.commit()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------
_limiter: MutationRateLimiter | None = None


def get_rate_limiter() -> MutationRateLimiter:
    if _limiter is None:
        raise RuntimeError("Rate limiter not configured — call configure_rate_limiter() first")
    return _limiter


def configure_rate_limiter(
    *,
    engine: Engine,
    max_requests: int = DEFAULT_RATE_LIMIT,
    window_seconds: int = DEFAULT_WINDOW_SECONDS,
) -> MutationRateLimiter:
    """Install the global limiter backed by *engine*."""
    global _limiter
    _limiter = MutationRateLimiter(
        max_requests=max_requests,
        window_seconds=window_seconds,
        engine=engine,
    )
    return _limiter


# ---------------------------------------------------------------------------
# FastAPI dependency: chains after get_current_user
# ---------------------------------------------------------------------------
async def rate_limited_user(
    request: Request,
    user: Identity = Depends(get_current_user),
) -> Identity:
    """Authenticate the caller *and* count the request against their window.

    Non-mutating methods pass straight through.  Use
    ``Depends(rate_limited_user)`` in place of ``Depends(get_current_user)``
    on content-creating endpoints.
    """
    if request.method not in _MUTATION_METHODS:
        return user

    limiter = get_rate_limiter()
    allowed, info = await asyncio.to_thread(limiter.check, user.user_id)

    if not allowed:
        logger.warning(
            "Rate limit exceeded for user %s: %d requests per %ds",
            user.user_id, limiter.max_requests, limiter.window_seconds,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "rate_limit_exceeded",
                "message": (
                    f"Rate limit exceeded: {limiter.max_requests} mutations"
                    f" per {limiter.window_seconds} seconds."
                ),
                "retry_after": info["reset"],
            },
            headers={"Retry-After": str(info["reset"])},
        )

    await asyncio.to_thread(limiter.record, user.user_id)
    return user
