"""
Tests for the balance aggregator.
"""

from decimal import Decimal

import pytest

from builders import friend_draft, group_draft, make_friends, make_group
from expense_ledger.errors import ErrorCode, MalformedBalanceError
from expense_ledger.schemas.group import MemberCreate
from expense_ledger.services.balance_aggregator import (
    BalanceAggregator,
    describe,
    rollup,
)
from expense_ledger.services.group_service import GroupService
from expense_ledger.services.ledger_service import LedgerService


@pytest.fixture
def ledger_state(db_session):
    """
    Alice is owed 66.67 in a trip, owes 5.00 in a flat and is owed
    20.00 by Bob directly.
    """
    trip = make_group(db_session, members=("bob", "carol"), name="Trip")
    flat = make_group(db_session, members=("dan",), creator="dan", name="Flat")
    GroupService(db_session).add_members(
        flat.id, [MemberCreate(member_id="alice", display_name="Alice")], "dan"
    )
    db_session.commit()
    make_friends(db_session)

    ledger = LedgerService(db_session)
    ledger.commit_expense(
        group_draft(trip.id, "100", "alice", ["bob", "alice", "carol"])
    )
    ledger.commit_expense(group_draft(flat.id, "10", "dan", ["dan", "alice"]))
    ledger.commit_expense(friend_draft("alice", "bob", "40", "alice"))
    return {"trip": trip.id, "flat": flat.id}


class TestNetPosition:

    def test_sums_groups_and_friends(self, db_session, ledger_state):
        net = BalanceAggregator(db_session).net_position("alice")
        assert net == Decimal("81.67")

    def test_repeated_reads_agree(self, db_session, ledger_state):
        aggregator = BalanceAggregator(db_session)
        assert aggregator.net_position("alice") == aggregator.net_position("alice")

    def test_explicit_ids_restrict_scope(self, db_session, ledger_state):
        aggregator = BalanceAggregator(db_session)
        net = aggregator.net_position(
            "alice", group_ids=[ledger_state["trip"]], friend_ids=[]
        )
        assert net == Decimal("66.67")

    def test_missing_records_count_as_zero(self, db_session, ledger_state):
        aggregator = BalanceAggregator(db_session)
        net = aggregator.net_position("alice", group_ids=[999], friend_ids=["nobody"])
        assert net == Decimal("0.00")

    def test_unknown_user_is_zero(self, db_session):
        assert BalanceAggregator(db_session).net_position("ghost") == 0

    def test_single_lookups(self, db_session, ledger_state):
        aggregator = BalanceAggregator(db_session)
        assert aggregator.balance_in_group("alice", ledger_state["flat"]) == Decimal("-5.00")
        assert aggregator.balance_with_friend("bob", "alice") == Decimal("-20.00")
        assert aggregator.balance_with_friend("alice", "carol") == 0


class TestPositionSummary:

    def test_contributions_and_label(self, db_session, ledger_state):
        summary = BalanceAggregator(db_session).position_summary("alice")

        assert summary.net == Decimal("81.67")
        assert summary.direction == "owed"
        assert summary.label == "you are owed ₹81.67"
        assert [(c.name, c.amount) for c in summary.groups] == [
            ("Trip", Decimal("66.67")),
            ("Flat", Decimal("-5.00")),
        ]
        assert [(c.source_id, c.amount) for c in summary.friends] == [
            ("bob", Decimal("20.00")),
        ]

    def test_owes_wording(self, db_session, ledger_state):
        summary = BalanceAggregator(db_session).position_summary("carol")
        assert summary.direction == "owes"
        assert summary.label == "you owe ₹33.33"

    def test_settled(self, db_session):
        summary = BalanceAggregator(db_session).position_summary("ghost")
        assert summary.direction == "settled"
        assert summary.net == 0


class TestUserGroups:

    @pytest.fixture
    def club_id(self, db_session, ledger_state):
        club = make_group(
            db_session, members=("alice",), creator="erin", name="Book club"
        )
        return club.id

    def test_every_group_with_direction(self, db_session, ledger_state, club_id):
        standings = BalanceAggregator(db_session).user_groups("alice")
        assert [(s.name, s.balance, s.direction) for s in standings] == [
            ("Trip", Decimal("66.67"), "owed"),
            ("Flat", Decimal("-5.00"), "owes"),
            ("Book club", Decimal("0.00"), "settled"),
        ]

    @pytest.mark.parametrize("direction, expected", [
        ("owed", ["Trip"]),
        ("owes", ["Flat"]),
        ("settled", ["Book club"]),
    ])
    def test_filter_by_direction(
        self, db_session, ledger_state, club_id, direction, expected
    ):
        standings = BalanceAggregator(db_session).user_groups("alice", direction)
        assert [s.name for s in standings] == expected

    def test_unknown_filter_rejected(self, db_session):
        with pytest.raises(ValueError, match="Unknown balance filter"):
            BalanceAggregator(db_session).user_groups("alice", "owing")

    def test_non_member_has_no_groups(self, db_session, ledger_state):
        assert BalanceAggregator(db_session).user_groups("zed") == []


class TestRollup:

    def test_none_counts_as_zero(self):
        assert rollup([Decimal("1.50"), None, "2"]) == Decimal("3.50")

    def test_malformed_balance(self):
        with pytest.raises(MalformedBalanceError) as exc_info:
            rollup([Decimal("1"), "abc"])
        assert exc_info.value.code == ErrorCode.MALFORMED_BALANCE

    def test_whole_amounts_drop_decimals(self):
        assert describe(Decimal("-100.00"), "₹") == ("owes", "you owe ₹100")
