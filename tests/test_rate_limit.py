"""
tests/test_rate_limit.py — Per-User Mutation Rate Limiting
===========================================================
Content-creating endpoints are limited per user, returning 429 with a
consistent error payload once the window is full.
"""

from __future__ import annotations

from dataclasses import replace

import pytest
from conftest import auth, make_user
from sqlalchemy.orm import Session

from connecthub.api.rate_limit import MutationRateLimiter
from connecthub.database.models import RateLimitEvent


# ---------------------------------------------------------------------------
# Unit tests for the limiter core (DB-backed)
# ---------------------------------------------------------------------------
class TestMutationRateLimiter:
    @pytest.fixture(autouse=True)
    def _limiter(self, db_engine):
        self.limiter = MutationRateLimiter(max_requests=5, window_seconds=60, engine=db_engine)
        self.engine = db_engine

    def test_allows_requests_within_limit(self):
        for _ in range(5):
            allowed, _ = self.limiter.check("alice")
            assert allowed
            self.limiter.record("alice")

    def test_blocks_after_limit_exceeded(self):
        limiter = MutationRateLimiter(max_requests=3, window_seconds=60, engine=self.engine)
        for _ in range(3):
            limiter.record("alice")

        allowed, info = limiter.check("alice")
        assert not allowed
        assert info["remaining"] == 0
        assert info["reset"] > 0

    def test_separate_users_have_separate_limits(self):
        limiter = MutationRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        limiter.record("alice")
        limiter.record("alice")

        assert not limiter.check("alice")[0]
        assert limiter.check("bob")[0]

    def test_remaining_count_decreases(self):
        assert self.limiter.check("alice")[1]["remaining"] == 5
        self.limiter.record("alice")
        assert self.limiter.check("alice")[1]["remaining"] == 4

    def test_expired_events_are_pruned(self):
        from datetime import UTC, datetime, timedelta

        limiter = MutationRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        old = datetime.now(UTC) - timedelta(minutes=5)
        with Session(self.engine) as s:
            s.add_all([RateLimitEvent(user_id="alice", timestamp=old) for _ in range(2)])
            s.commit()

        allowed, info = limiter.check("alice")
        assert allowed
        assert info["remaining"] == 2

    def test_reset_clears_specific_user(self):
        limiter = MutationRateLimiter(max_requests=2, window_seconds=60, engine=self.engine)
        limiter.record("alice")
        limiter.record("alice")
        limiter.record("bob")

        limiter.reset("alice")

        assert limiter.check("alice")[0]
        assert limiter.check("bob")[1]["remaining"] == 1

    def test_reset_all(self):
        limiter = MutationRateLimiter(max_requests=1, window_seconds=60, engine=self.engine)
        limiter.record("alice")
        limiter.record("bob")

        limiter.reset()

        assert limiter.check("alice")[0]
        assert limiter.check("bob")[0]


# ---------------------------------------------------------------------------
# Integration tests with FastAPI TestClient
# ---------------------------------------------------------------------------
class TestRateLimitDependency:
    @pytest.fixture
    def limited_client(self, db_engine, test_config):
        from fastapi.testclient import TestClient

        from connecthub.api.deps import get_config, get_engine
        from connecthub.api.main import app
        from connecthub.api.rate_limit import configure_rate_limiter

        cfg = replace(test_config, mutation_rate_limit=3)
        app.dependency_overrides[get_engine] = lambda: db_engine
        app.dependency_overrides[get_config] = lambda: cfg
        configure_rate_limiter(engine=db_engine, max_requests=3, window_seconds=60)
        make_user(db_engine, "alice")
        make_user(db_engine, "bob")
        yield TestClient(app, raise_server_exceptions=False)
        app.dependency_overrides.clear()

    def _post_interest(self, client, name, sub="alice"):
        return client.post("/api/interests", json={"name": name}, headers=auth(sub))

    def test_fourth_mutation_is_rejected(self, limited_client):
        for i in range(3):
            assert self._post_interest(limited_client, f"Interest {i}").status_code == 201

        resp = self._post_interest(limited_client, "One too many")

        assert resp.status_code == 429
        assert int(resp.headers["Retry-After"]) > 0
        detail = resp.json()["detail"]
        assert detail["error"] == "rate_limit_exceeded"
        assert detail["retry_after"] > 0

    def test_reads_do_not_count(self, limited_client):
        for _ in range(10):
            assert limited_client.get("/api/interests").status_code == 200
        assert self._post_interest(limited_client, "Still fine").status_code == 201

    def test_limits_are_per_user(self, limited_client):
        for i in range(3):
            self._post_interest(limited_client, f"Alice {i}")
        assert self._post_interest(limited_client, "Bob's", sub="bob").status_code == 201

    def test_unauthenticated_mutation_is_401_not_429(self, limited_client):
        resp = limited_client.post("/api/interests", json={"name": "Anon"})
        assert resp.status_code == 401
