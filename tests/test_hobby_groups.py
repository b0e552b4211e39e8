"""
tests/test_hobby_groups.py — Hobby meetup groups
=================================================
"""

from __future__ import annotations

import pytest
from conftest import make_user
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from connecthub.constants import NotificationType
from connecthub.database.models import HobbyGroup, HobbyGroupMember
from connecthub.errors import DuplicateError, InvalidStateError, NotFoundError
from connecthub.services import catalog_service, hobby_group_service, notification_service


@pytest.fixture
def chess(engine):
    return catalog_service.create_hobby(engine, {"name": "Chess"})


def _group(engine, hobby_id, creator="alice", **overrides):
    return hobby_group_service.create_hobby_group(
        engine, creator, {"name": "Park chess", "hobby_id": hobby_id, **overrides}
    )


def _member_rows(engine, group_id) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(HobbyGroupMember)
            .where(HobbyGroupMember.group_id == group_id)
        ) or 0


def _current_members(engine, group_id) -> int:
    with Session(engine) as session:
        return session.get(HobbyGroup, group_id).current_members


class TestCreate:
    def test_creator_is_organizer(self, engine, users, chess):
        group = _group(engine, chess.id)

        assert group.current_members == 1
        members = hobby_group_service.get_hobby_group_members(engine, group.id)
        assert [(m.role, u.id) for m, u in members] == [("organizer", "alice")]

    def test_unknown_hobby(self, engine, users):
        with pytest.raises(NotFoundError):
            _group(engine, "missing")

    def test_listings(self, engine, users, chess):
        group = _group(engine, chess.id)

        [(g, hobby, creator)] = hobby_group_service.get_all_hobby_groups(engine)
        assert (g.id, hobby.name, creator.id) == (group.id, "Chess", "alice")
        assert [g.id for g, _ in hobby_group_service.get_hobby_groups_by_hobby(engine, chess.id)] == [group.id]
        [(g, _, role)] = hobby_group_service.get_user_hobby_groups(engine, "alice")
        assert role == "organizer"


class TestJoinLeave:
    def test_join_increments_by_exactly_one(self, engine, users, chess):
        group = _group(engine, chess.id)
        before = _current_members(engine, group.id)

        hobby_group_service.join_hobby_group(engine, group.id, "bob")

        assert _current_members(engine, group.id) == before + 1
        assert _current_members(engine, group.id) == _member_rows(engine, group.id)

    def test_join_notifies_creator(self, engine, users, chess):
        group = _group(engine, chess.id)
        hobby_group_service.join_hobby_group(engine, group.id, "bob")

        [note] = notification_service.get_notifications(engine, "alice")
        assert note.type == NotificationType.HOBBY_GROUP_JOIN
        assert note.related_id == group.id

    def test_duplicate_join_rejected(self, engine, users, chess):
        group = _group(engine, chess.id)
        hobby_group_service.join_hobby_group(engine, group.id, "bob")

        with pytest.raises(DuplicateError):
            hobby_group_service.join_hobby_group(engine, group.id, "bob")
        assert _member_rows(engine, group.id) == 2

    def test_creator_cannot_join_twice(self, engine, users, chess):
        group = _group(engine, chess.id)
        with pytest.raises(DuplicateError):
            hobby_group_service.join_hobby_group(engine, group.id, "alice")

    def test_full_group_rejects(self, engine, users, chess):
        group = _group(engine, chess.id, max_members=2)
        hobby_group_service.join_hobby_group(engine, group.id, "bob")

        with pytest.raises(InvalidStateError):
            hobby_group_service.join_hobby_group(engine, group.id, "carol")
        assert _current_members(engine, group.id) == 2

    def test_leave_recounts(self, engine, users, chess):
        group = _group(engine, chess.id)
        hobby_group_service.join_hobby_group(engine, group.id, "bob")
        hobby_group_service.leave_hobby_group(engine, group.id, "bob")

        assert _current_members(engine, group.id) == 1
        assert hobby_group_service.get_user_hobby_groups(engine, "bob") == []

    def test_unknown_group(self, engine, users):
        with pytest.raises(NotFoundError):
            hobby_group_service.join_hobby_group(engine, "missing", "bob")

    def test_leave_unknown_group(self, engine, users):
        with pytest.raises(NotFoundError):
            hobby_group_service.leave_hobby_group(engine, "missing", "bob")

    def test_unsigned_joiner_is_not_found(self, fk_engine):
        make_user(fk_engine, "alice")
        hobby = catalog_service.create_hobby(fk_engine, {"name": "Chess"})
        group = _group(fk_engine, hobby.id)

        with pytest.raises(NotFoundError):
            hobby_group_service.join_hobby_group(fk_engine, group.id, "ghost")
        assert _member_rows(fk_engine, group.id) == 1
