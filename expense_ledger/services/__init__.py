"""Business logic services."""

from expense_ledger.services.activity_service import ActivityService
from expense_ledger.services.balance_aggregator import BalanceAggregator
from expense_ledger.services.friend_service import FriendService
from expense_ledger.services.group_service import GroupService
from expense_ledger.services.ledger_service import LedgerService
from expense_ledger.services.timeline_service import TimelineService

__all__ = [
    "ActivityService",
    "BalanceAggregator",
    "FriendService",
    "GroupService",
    "LedgerService",
    "TimelineService",
]
