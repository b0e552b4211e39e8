"""
tests/test_messages.py — Direct messages and read state
========================================================
"""

from __future__ import annotations

import pytest

from connecthub.constants import NotificationType
from connecthub.errors import NotFoundError
from connecthub.services import message_service, notification_service


class TestConversation:
    def test_both_directions_in_time_order(self, engine, users):
        message_service.create_message(engine, "alice", "bob", "hi bob")
        message_service.create_message(engine, "bob", "alice", "hi alice")
        message_service.create_message(engine, "alice", "bob", "coffee?")
        message_service.create_message(engine, "carol", "bob", "not in this thread")

        thread = message_service.get_conversation(engine, "bob", "alice")

        assert [m.content for m, _, _ in thread] == ["hi bob", "hi alice", "coffee?"]
        assert [(s.id, r.id) for _, s, r in thread][:2] == [("alice", "bob"), ("bob", "alice")]

    def test_unknown_receiver(self, engine, users):
        with pytest.raises(NotFoundError):
            message_service.create_message(engine, "alice", "nobody", "hello?")

    def test_send_notifies_receiver(self, engine, users):
        message_service.create_message(engine, "alice", "bob", "x" * 200)

        [note] = notification_service.get_notifications(engine, "bob")
        assert note.type == NotificationType.MESSAGE
        assert note.related_id == "alice"
        assert len(note.message) < 200


class TestReadState:
    def test_mark_read_is_receiver_scoped(self, engine, users):
        message_service.create_message(engine, "alice", "bob", "one")
        message_service.create_message(engine, "alice", "bob", "two")
        message_service.create_message(engine, "bob", "alice", "reply")

        marked = message_service.mark_messages_as_read(engine, "bob", "alice")

        assert marked == 2
        assert message_service.get_unread_count(engine, "bob") == 0
        assert message_service.get_unread_count(engine, "alice") == 1

    def test_unread_count_per_sender(self, engine, users):
        message_service.create_message(engine, "alice", "carol", "a")
        message_service.create_message(engine, "bob", "carol", "b1")
        message_service.create_message(engine, "bob", "carol", "b2")

        assert message_service.get_unread_count(engine, "carol") == 3
        assert message_service.get_unread_count(engine, "carol", sender_id="bob") == 2


class TestConversationList:
    def test_one_entry_per_counterpart(self, engine, users):
        message_service.create_message(engine, "alice", "bob", "first")
        message_service.create_message(engine, "carol", "alice", "from carol")
        message_service.create_message(engine, "bob", "alice", "latest from bob")

        summaries = message_service.get_user_conversations(engine, "alice")

        assert [s.user.id for s in summaries] == ["bob", "carol"]
        assert summaries[0].last_message.content == "latest from bob"
        assert summaries[0].unread_count == 1
        assert summaries[1].unread_count == 1

    def test_latest_message_in_either_direction(self, engine, users):
        for i in range(5):
            message_service.create_message(engine, "bob", "alice", f"bob {i}")
        message_service.create_message(engine, "alice", "bob", "my reply")
        message_service.create_message(engine, "carol", "alice", "hello")

        summaries = message_service.get_user_conversations(engine, "alice")

        assert [(s.user.id, s.last_message.content) for s in summaries] == [
            ("carol", "hello"),
            ("bob", "my reply"),
        ]
        assert summaries[1].unread_count == 5

    def test_no_messages(self, engine, users):
        assert message_service.get_user_conversations(engine, "alice") == []
