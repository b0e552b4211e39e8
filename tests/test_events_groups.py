"""
tests/test_events_groups.py — Events, attendance and interest groups
=====================================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import update
from sqlalchemy.orm import Session

from connecthub.database.models import Event
from connecthub.errors import InvalidStateError, NotFoundError
from connecthub.services import activity_service, event_service, group_service


def _event(engine, creator="alice", **overrides):
    data = {
        "title": "Sunrise hike",
        "start_date": datetime.now(UTC) + timedelta(days=3),
        "tags": ["outdoors"],
        **overrides,
    }
    return event_service.create_event(engine, creator, data)


# ===========================================================================
# Events
# ===========================================================================
class TestEvents:
    def test_create_records_activity(self, engine, users):
        event = _event(engine)

        assert event.attendee_count == 0
        [(activity, author)] = activity_service.get_activities(engine, "bob")
        assert activity.metadata_ == {"event_id": event.id}
        assert author.id == "alice"

    def test_join_counts_only_going(self, engine, users):
        event = _event(engine)
        event_service.join_event(engine, event.id, "bob")
        event_service.join_event(engine, event.id, "carol", "maybe")

        [(refreshed, _)] = event_service.get_events(engine)
        assert refreshed.attendee_count == 1
        assert len(event_service.get_event_attendees(engine, event.id)) == 2

    def test_rejoin_updates_status_in_place(self, engine, users):
        event = _event(engine)
        event_service.join_event(engine, event.id, "bob", "maybe")
        event_service.join_event(engine, event.id, "bob", "going")

        attendees = event_service.get_event_attendees(engine, event.id)
        assert [(a.status, u.id) for a, u in attendees] == [("going", "bob")]

    def test_capacity_enforced_for_going(self, engine, users):
        event = _event(engine, max_attendees=1)
        event_service.join_event(engine, event.id, "bob")

        with pytest.raises(InvalidStateError):
            event_service.join_event(engine, event.id, "carol")
        # "maybe" does not take a seat
        event_service.join_event(engine, event.id, "carol", "maybe")
        # re-confirming an existing seat is fine
        event_service.join_event(engine, event.id, "bob", "going")

    def test_invalid_status(self, engine, users):
        event = _event(engine)
        with pytest.raises(InvalidStateError):
            event_service.join_event(engine, event.id, "bob", "perhaps")

    def test_unknown_event(self, engine, users):
        with pytest.raises(NotFoundError):
            event_service.join_event(engine, "missing", "bob")

    def test_leave_recounts(self, engine, users):
        event = _event(engine)
        event_service.join_event(engine, event.id, "bob")
        event_service.leave_event(engine, event.id, "bob")

        [(refreshed, _)] = event_service.get_events(engine)
        assert refreshed.attendee_count == 0

    def test_user_events_include_created_and_attending(self, engine, users):
        mine = _event(engine, creator="alice", title="Alice's")
        theirs = _event(engine, creator="bob", title="Bob's")
        _event(engine, creator="carol", title="Carol's")
        event_service.join_event(engine, theirs.id, "alice")

        titles = {e.title for e, _ in event_service.get_user_events(engine, "alice")}
        assert titles == {mine.title, theirs.title}

    def test_listing_newest_start_first(self, engine, users):
        soon = _event(engine, title="soon", start_date=datetime.now(UTC) + timedelta(days=1))
        later = _event(engine, title="later", start_date=datetime.now(UTC) + timedelta(days=9))

        assert [e.id for e, _ in event_service.get_events(engine)] == [later.id, soon.id]


# ===========================================================================
# Groups
# ===========================================================================
class TestGroups:
    def test_creator_joins_as_admin(self, engine, users):
        group = group_service.create_group(engine, "alice", {"name": "Night owls"})

        assert group.member_count == 1
        [(g, creator, role)] = group_service.get_user_groups(engine, "alice")
        assert (g.id, creator.id, role) == (group.id, "alice", "admin")

    def test_join_is_idempotent(self, engine, users):
        group = group_service.create_group(engine, "alice", {"name": "Night owls"})
        group_service.join_group(engine, group.id, "bob")
        group_service.join_group(engine, group.id, "bob")

        [(g, _)] = group_service.get_groups(engine)
        assert g.member_count == 2

    def test_leave_recounts(self, engine, users):
        group = group_service.create_group(engine, "alice", {"name": "Night owls"})
        group_service.join_group(engine, group.id, "bob")
        group_service.leave_group(engine, group.id, "bob")

        [(g, _)] = group_service.get_groups(engine)
        assert g.member_count == 1
        assert group_service.get_user_groups(engine, "bob") == []

    def test_unknown_group(self, engine, users):
        with pytest.raises(NotFoundError):
            group_service.join_group(engine, "missing", "bob")


class TestEventCapacity:
    def test_cap_checks_recomputed_count(self, engine, users):
        event = _event(engine, max_attendees=1)
        event_service.join_event(engine, event.id, "bob")
        with Session(engine) as session:
            session.execute(update(Event).where(Event.id == event.id).values(attendee_count=0))
            session.commit()

        with pytest.raises(InvalidStateError):
            event_service.join_event(engine, event.id, "carol")
        assert len(event_service.get_event_attendees(engine, event.id)) == 1
