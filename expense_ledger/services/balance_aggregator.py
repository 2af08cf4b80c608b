"""
Balance aggregator: read-only roll-ups of a user's position.

A user's net position is the sum of their balance in every group
they belong to plus their side of every friend pair. Positive means
the user is owed money overall, negative means they owe.

Nothing here writes. Two calls with no commit in between return the
same figures.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_ledger.config import get_settings
from expense_ledger.errors import MalformedBalanceError
from expense_ledger.models.friend_ledger import FriendLedgerEntry
from expense_ledger.models.group import Group, GroupMember
from expense_ledger.utils.money import ZERO, format_currency, quantize, to_decimal


@dataclass(slots=True)
class Contribution:
    source_type: str
    source_id: str
    name: str
    amount: Decimal


@dataclass(slots=True)
class GroupStanding:
    group_id: int
    name: str
    balance: Decimal
    direction: str


@dataclass(slots=True)
class PositionSummary:
    user_id: str
    net: Decimal
    direction: str
    label: str
    groups: list[Contribution] = field(default_factory=list)
    friends: list[Contribution] = field(default_factory=list)


def _as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    try:
        return to_decimal(value)
    except InvalidOperation:
        raise MalformedBalanceError(
            f"Stored balance {value!r} is not a number", value=repr(value)
        )


def rollup(values: Iterable) -> Decimal:
    """Sum stored balances; None counts as zero."""
    return quantize(sum((_as_decimal(v) for v in values), ZERO))


DIRECTIONS = ("owed", "owes", "settled")


def direction_of(amount: Decimal) -> str:
    if amount > 0:
        return "owed"
    if amount < 0:
        return "owes"
    return "settled"


def describe(net: Decimal, symbol: str) -> tuple[str, str]:
    direction = direction_of(net)
    if direction == "owed":
        return direction, f"you are owed {format_currency(net, symbol)}"
    if direction == "owes":
        return direction, f"you owe {format_currency(net, symbol)}"
    return direction, "you are all settled up"


class BalanceAggregator:

    def __init__(self, db: Session):
        self.db = db

    def _group_balances(
        self, user_id: str, group_ids: Iterable[int] | None = None
    ) -> list:
        stmt = select(GroupMember.balance).where(GroupMember.member_id == user_id)
        if group_ids is not None:
            stmt = stmt.where(GroupMember.group_id.in_(list(group_ids)))
        return list(self.db.execute(stmt).scalars().all())

    def _friend_balances(
        self, user_id: str, friend_ids: Iterable[str] | None = None
    ) -> list:
        stmt = select(FriendLedgerEntry.net_amount).where(
            FriendLedgerEntry.owner_id == user_id
        )
        if friend_ids is not None:
            stmt = stmt.where(FriendLedgerEntry.friend_id.in_(list(friend_ids)))
        return list(self.db.execute(stmt).scalars().all())

    def net_position(
        self,
        user_id: str,
        group_ids: Iterable[int] | None = None,
        friend_ids: Iterable[str] | None = None,
    ) -> Decimal:
        """
        Sum a user's balances across groups and friendships.

        With explicit ids, only those contexts are counted; an id the
        user has no record for contributes zero.
        """
        return rollup(
            self._group_balances(user_id, group_ids)
            + self._friend_balances(user_id, friend_ids)
        )

    def balance_in_group(self, user_id: str, group_id: int) -> Decimal:
        return rollup(self._group_balances(user_id, [group_id]))

    def balance_with_friend(self, user_id: str, friend_id: str) -> Decimal:
        return rollup(self._friend_balances(user_id, [friend_id]))

    def position_summary(self, user_id: str) -> PositionSummary:
        """Per-context contributions plus the net figure and its wording."""
        rows = self.db.execute(
            select(Group.id, Group.name, GroupMember.balance)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.member_id == user_id)
            .order_by(Group.id)
        ).all()
        groups = [
            Contribution("group", str(group_id), name, rollup([balance]))
            for group_id, name, balance in rows
        ]

        entries = self.db.execute(
            select(FriendLedgerEntry)
            .where(FriendLedgerEntry.owner_id == user_id)
            .order_by(FriendLedgerEntry.friend_id)
        ).scalars().all()
        friends = [
            Contribution(
                "friend", e.friend_id, e.friend_name, rollup([e.net_amount])
            )
            for e in entries
        ]

        net = rollup([c.amount for c in groups + friends])
        direction, label = describe(net, get_settings().CURRENCY_SYMBOL)
        return PositionSummary(
            user_id=user_id,
            net=net,
            direction=direction,
            label=label,
            groups=groups,
            friends=friends,
        )

    def user_groups(
        self, user_id: str, direction: str | None = None
    ) -> list[GroupStanding]:
        """
        List the groups a user belongs to with their balance in each.

        ``direction`` keeps only groups where the user is owed
        (balance above zero), owes (below zero) or is settled.
        """
        if direction is not None and direction not in DIRECTIONS:
            raise ValueError(f"Unknown balance filter: {direction}")

        rows = self.db.execute(
            select(Group.id, Group.name, GroupMember.balance)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .where(GroupMember.member_id == user_id)
            .order_by(Group.id)
        ).all()

        standings = []
        for group_id, name, balance in rows:
            amount = rollup([balance])
            standing = GroupStanding(group_id, name, amount, direction_of(amount))
            if direction is None or standing.direction == direction:
                standings.append(standing)
        return standings
