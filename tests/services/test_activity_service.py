"""
Tests for the activity feed and its read state.
"""

import pytest

from builders import make_friends, make_group
from expense_ledger.errors import NotFoundError
from expense_ledger.services.activity_service import ActivityService


@pytest.fixture
def feed(db_session):
    """Alice has two unread events; Bob has one."""
    make_group(db_session)
    make_friends(db_session)
    make_friends(db_session, user_id="bob", friend_id="carol")
    return ActivityService(db_session)


class TestUnreadCount:

    def test_new_activity_is_unread(self, feed):
        assert feed.unread_count("alice") == 2
        assert feed.unread_count("bob") == 1
        assert all(e.read_at is None for e in feed.recent_for("alice"))

    def test_unknown_actor_has_nothing_unread(self, feed):
        assert feed.unread_count("zed") == 0


class TestMarkRead:

    def test_marks_one_entry(self, db_session, feed):
        newest = feed.recent_for("alice")[0]
        entry = feed.mark_read("alice", newest.id)
        db_session.commit()

        assert entry.read_at is not None
        assert feed.unread_count("alice") == 1

    def test_first_read_time_kept(self, db_session, feed):
        newest = feed.recent_for("alice")[0]
        first = feed.mark_read("alice", newest.id).read_at
        db_session.commit()

        assert feed.mark_read("alice", newest.id).read_at == first

    def test_other_actors_entry_not_found(self, feed):
        bobs = feed.recent_for("bob")[0]
        with pytest.raises(NotFoundError):
            feed.mark_read("alice", bobs.id)

    def test_missing_entry(self, feed):
        with pytest.raises(NotFoundError, match="Activity 999 not found"):
            feed.mark_read("alice", 999)


class TestMarkAllRead:

    def test_marks_only_that_actor(self, db_session, feed):
        assert feed.mark_all_read("alice") == 2
        db_session.commit()

        assert feed.unread_count("alice") == 0
        assert feed.unread_count("bob") == 1
        assert all(e.read_at is not None for e in feed.recent_for("alice"))

    def test_second_pass_marks_nothing(self, db_session, feed):
        feed.mark_all_read("alice")
        db_session.commit()
        assert feed.mark_all_read("alice") == 0
