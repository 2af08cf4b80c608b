"""
Expense timeline: groups logged expenses by day and by category.

Timelines are derived views. They are recomputed from the
transaction log on every read and never stored.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_ledger.models.enums import ExpenseCategory
from expense_ledger.models.friend_ledger import pair_key
from expense_ledger.models.transaction_log import TransactionLogEntry
from expense_ledger.utils.money import ZERO, quantize


@dataclass(slots=True)
class TimelineDay:
    day: date
    total: Decimal
    entries: list = field(default_factory=list)


@dataclass(slots=True)
class CategoryShare:
    category: ExpenseCategory
    amount: Decimal
    percentage: Decimal


def _newest_first(entry) -> tuple:
    return (entry.entry_date, entry.created_at, entry.id or 0)


def group_by_date(entries: Sequence) -> list[TimelineDay]:
    """Bucket entries by calendar date, newest date and newest entry first."""
    days: dict[date, TimelineDay] = {}
    for entry in sorted(entries, key=_newest_first, reverse=True):
        bucket = days.get(entry.entry_date)
        if bucket is None:
            bucket = days[entry.entry_date] = TimelineDay(entry.entry_date, ZERO)
        bucket.entries.append(entry)
        bucket.total += entry.amount
    return list(days.values())


def category_breakdown(entries: Sequence) -> list[CategoryShare]:
    totals: dict[ExpenseCategory, Decimal] = {}
    for entry in entries:
        category = ExpenseCategory(entry.category)
        totals[category] = totals.get(category, ZERO) + entry.amount

    grand_total = sum(totals.values(), ZERO)
    if grand_total <= 0:
        return []

    shares = [
        CategoryShare(
            category=category,
            amount=quantize(amount),
            percentage=quantize(amount * 100 / grand_total),
        )
        for category, amount in totals.items()
    ]
    shares.sort(key=lambda s: (-s.amount, s.category.value))
    return shares


class TimelineService:

    def __init__(self, db: Session):
        self.db = db

    def _load(self, *criteria) -> list[TransactionLogEntry]:
        return list(self.db.execute(
            select(TransactionLogEntry)
            .where(*criteria)
            .order_by(
                TransactionLogEntry.entry_date.desc(),
                TransactionLogEntry.created_at.desc(),
                TransactionLogEntry.id.desc(),
            )
        ).scalars().all())

    def entries_for_group(self, group_id: int) -> list[TransactionLogEntry]:
        return self._load(TransactionLogEntry.group_id == group_id)

    def entries_for_friends(
        self, user_id: str, friend_id: str
    ) -> list[TransactionLogEntry]:
        return self._load(
            TransactionLogEntry.friend_pair == pair_key(user_id, friend_id)
        )

    def for_group(self, group_id: int) -> tuple[list[TimelineDay], list[CategoryShare]]:
        entries = self.entries_for_group(group_id)
        return group_by_date(entries), category_breakdown(entries)

    def for_friends(
        self, user_id: str, friend_id: str
    ) -> tuple[list[TimelineDay], list[CategoryShare]]:
        entries = self.entries_for_friends(user_id, friend_id)
        return group_by_date(entries), category_breakdown(entries)
