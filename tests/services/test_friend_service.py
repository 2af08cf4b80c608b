"""
Tests for friendship management.
"""

import pytest

from builders import friend_draft, make_friends
from expense_ledger.errors import NotFoundError
from expense_ledger.models import ActivityType
from expense_ledger.schemas.friend import FriendshipCreate
from expense_ledger.services.activity_service import ActivityService
from expense_ledger.services.friend_service import FriendService
from expense_ledger.services.ledger_service import LedgerService


class TestAddFriend:

    def test_both_directions_created(self, db_session):
        entry = make_friends(db_session)
        service = FriendService(db_session)

        assert entry.owner_id == "alice"
        assert entry.friend_name == "Bob"
        reverse = service.get_entry("bob", "alice")
        assert reverse.friend_name == "Alice"
        assert entry.net_amount == 0
        assert reverse.net_amount == 0

    def test_self_friendship_rejected(self, db_session):
        with pytest.raises(ValueError, match="yourself"):
            FriendService(db_session).add_friend(FriendshipCreate(
                user_id="alice", user_name="Alice",
                friend_id="alice", friend_name="Alice",
            ))

    def test_duplicate_rejected_from_either_side(self, db_session):
        make_friends(db_session)
        with pytest.raises(ValueError, match="already a friend"):
            make_friends(db_session, "bob", "alice")

    def test_recorded_in_activity(self, db_session):
        make_friends(db_session)
        feed = ActivityService(db_session).recent_for("alice")
        assert feed[0].event_type == ActivityType.FRIEND_ADDED


class TestRemoveFriend:

    def test_settled_friendship_removed(self, db_session):
        make_friends(db_session)
        service = FriendService(db_session)
        service.remove_friend("alice", "bob")
        db_session.commit()

        assert service.get_entry("alice", "bob") is None
        assert service.get_entry("bob", "alice") is None

    def test_outstanding_balance_blocks_removal(self, db_session):
        make_friends(db_session)
        LedgerService(db_session).commit_expense(
            friend_draft("alice", "bob", "40", "alice")
        )
        with pytest.raises(ValueError, match="outstanding balance"):
            FriendService(db_session).remove_friend("bob", "alice")

    def test_unknown_friend(self, db_session):
        with pytest.raises(NotFoundError, match="not a friend"):
            FriendService(db_session).remove_friend("alice", "bob")


class TestListFriends:

    def test_sorted_by_name(self, db_session):
        make_friends(db_session, "alice", "zoe")
        make_friends(db_session, "alice", "bob")

        friends = FriendService(db_session).list_friends("alice")
        assert [f.friend_id for f in friends] == ["bob", "zoe"]
