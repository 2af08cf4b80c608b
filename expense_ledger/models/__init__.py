"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from expense_ledger.models.base import Base
from expense_ledger.models.enums import (
    SplitMethod,
    ExpenseCategory,
    ActivityType,
)
from expense_ledger.models.activity_log import ActivityLog
from expense_ledger.models.group import Group, GroupMember
from expense_ledger.models.friend_ledger import FriendLedgerEntry, pair_key
from expense_ledger.models.expense import Expense, ExpenseSplit
from expense_ledger.models.transaction_log import TransactionLogEntry

__all__ = [
    "Base",
    "SplitMethod",
    "ExpenseCategory",
    "ActivityType",
    "ActivityLog",
    "Group",
    "GroupMember",
    "FriendLedgerEntry",
    "pair_key",
    "Expense",
    "ExpenseSplit",
    "TransactionLogEntry",
]
