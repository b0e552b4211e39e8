"""
tests/test_matching.py — Shared-interest and shared-hobby discovery
====================================================================
"""

from __future__ import annotations

import pytest
from conftest import make_user

from connecthub.services import catalog_service, matching_service


@pytest.fixture
def catalog(engine):
    """Photography, Hiking, Cooking, Chess as interests and hobbies."""
    names = ("Photography", "Hiking", "Cooking", "Chess")
    interests = {n: catalog_service.create_interest(engine, {"name": n}) for n in names}
    hobbies = {n: catalog_service.create_hobby(engine, {"name": n}) for n in names}
    return interests, hobbies


def _give_interests(engine, user_id, interests, *names):
    for n in names:
        catalog_service.add_user_interest(engine, user_id, interests[n].id)


def _give_hobbies(engine, user_id, hobbies, *names):
    for n in names:
        catalog_service.add_user_hobby(engine, user_id, hobbies[n].id)


# ===========================================================================
# get_users_with_shared_interests
# ===========================================================================
class TestSharedInterests:
    def test_hiking_overlap_scenario(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Photography", "Hiking")
        _give_interests(engine, "bob", interests, "Hiking", "Cooking")

        matches = matching_service.get_users_with_shared_interests(engine, "alice")

        assert [m.user.id for m in matches] == ["bob"]
        assert [i.name for i in matches[0].shared] == ["Hiking"]

    def test_all_interests_mirrors_shared(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Photography", "Hiking")
        _give_interests(engine, "bob", interests, "Hiking", "Cooking")

        match = matching_service.get_users_with_shared_interests(engine, "alice")[0]
        assert {i.id for i in match.all} == {i.id for i in match.shared}

    def test_caller_never_matches_self(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Hiking")
        _give_interests(engine, "bob", interests, "Hiking")

        matches = matching_service.get_users_with_shared_interests(engine, "alice")
        assert "alice" not in {m.user.id for m in matches}

    def test_no_interests_returns_empty(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "bob", interests, "Hiking")
        assert matching_service.get_users_with_shared_interests(engine, "alice") == []

    def test_users_without_overlap_are_excluded(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Photography")
        _give_interests(engine, "bob", interests, "Cooking")
        assert matching_service.get_users_with_shared_interests(engine, "alice") == []

    def test_sorted_by_shared_count_descending(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Photography", "Hiking", "Chess")
        _give_interests(engine, "bob", interests, "Hiking")
        _give_interests(engine, "carol", interests, "Photography", "Hiking", "Chess")

        matches = matching_service.get_users_with_shared_interests(engine, "alice")

        assert [m.user.id for m in matches] == ["carol", "bob"]
        assert [len(m.shared) for m in matches] == [3, 1]

    def test_limit_truncates(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Hiking")
        for uid in ("bob", "carol", "dave", "erin"):
            if uid not in users:
                make_user(engine, uid)
            _give_interests(engine, uid, interests, "Hiking")

        matches = matching_service.get_users_with_shared_interests(engine, "alice", limit=2)
        assert len(matches) == 2


# ===========================================================================
# get_users_with_shared_hobbies
# ===========================================================================
class TestSharedHobbies:
    def test_partners_ranked_by_overlap(self, engine, users, catalog):
        _, hobbies = catalog
        _give_hobbies(engine, "alice", hobbies, "Chess", "Cooking")
        _give_hobbies(engine, "bob", hobbies, "Chess")
        _give_hobbies(engine, "carol", hobbies, "Chess", "Cooking", "Hiking")

        matches = matching_service.get_users_with_shared_hobbies(engine, "alice")

        assert [m.user.id for m in matches] == ["carol", "bob"]
        assert sorted(h.name for h in matches[0].shared) == ["Chess", "Cooking"]

    def test_no_hobbies_returns_empty(self, engine, users, catalog):
        assert matching_service.get_users_with_shared_hobbies(engine, "alice") == []


# ===========================================================================
# Explicit search
# ===========================================================================
class TestSearch:
    def test_search_by_interests_groups_per_user(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "bob", interests, "Hiking", "Cooking")
        _give_interests(engine, "carol", interests, "Cooking")

        hits = matching_service.search_users_by_interests(
            engine, [interests["Hiking"].id, interests["Cooking"].id]
        )
        by_user = {h.user.id: sorted(i.name for i in h.entities) for h in hits}

        assert by_user == {"bob": ["Cooking", "Hiking"], "carol": ["Cooking"]}

    def test_search_excludes_caller(self, engine, users, catalog):
        interests, _ = catalog
        _give_interests(engine, "alice", interests, "Hiking")
        _give_interests(engine, "bob", interests, "Hiking")

        hits = matching_service.search_users_by_interests(
            engine, [interests["Hiking"].id], exclude_user_id="alice"
        )
        assert [h.user.id for h in hits] == ["bob"]

    def test_empty_id_list_returns_empty(self, engine, users, catalog):
        assert matching_service.search_users_by_interests(engine, []) == []
        assert matching_service.search_users_by_hobbies(engine, []) == []

    def test_search_by_hobbies(self, engine, users, catalog):
        _, hobbies = catalog
        _give_hobbies(engine, "bob", hobbies, "Chess")
        _give_hobbies(engine, "carol", hobbies, "Hiking")

        hits = matching_service.search_users_by_hobbies(
            engine, [hobbies["Chess"].id], exclude_user_id="alice"
        )
        assert [h.user.id for h in hits] == ["bob"]
        assert [x.name for x in hits[0].entities] == ["Chess"]
