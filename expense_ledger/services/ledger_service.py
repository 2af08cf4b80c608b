"""
Ledger service: the only writer of balances.

Each expense commit follows the same steps:
1. Compute and validate allocations (pure, before any I/O)
2. Re-read the group members or both friend entries
3. Re-check that every referenced member still exists
4. Compute balance deltas and check the ledger invariants
5. Write balances, the expense, its log entry and activity row
6. Commit as one transaction

Concurrency is optimistic. Group and friend rows carry a version
counter, so a commit that read stale state fails at flush time with
StaleDataError. The whole attempt is rolled back and retried from
step 2, a bounded number of times, after a short jittered pause.
"""

import random
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from expense_ledger.config import get_settings
from expense_ledger.errors import (
    CommitTimeoutError,
    ConcurrentUpdateConflict,
    InvariantViolation,
    NotFoundError,
    StaleMembershipError,
)
from expense_ledger.logging import get_logger
from expense_ledger.models.enums import ActivityType
from expense_ledger.models.expense import Expense, ExpenseSplit
from expense_ledger.models.friend_ledger import FriendLedgerEntry, pair_key
from expense_ledger.models.group import Group, GroupMember
from expense_ledger.models.transaction_log import TransactionLogEntry
from expense_ledger.schemas.expense import ExpenseDraft
from expense_ledger.services.activity_service import ActivityService
from expense_ledger.services.split_calculator import (
    Allocation,
    allocation_map,
    compute_allocations,
)
from expense_ledger.utils.money import ZERO

log = get_logger(__name__)


@dataclass(slots=True)
class CommitResult:
    expense_id: uuid.UUID
    balances: dict[str, Decimal] = field(default_factory=dict)
    attempts: int = 1


def group_balance_deltas(
    allocations: Sequence[Allocation], payer_id: str
) -> dict[str, Decimal]:
    """
    Balance change per member for a group expense.

    The payer is owed everything except their own share; every other
    participant owes their allocation. The deltas sum to zero when the
    allocations sum to the total.
    """
    total = sum((a.amount for a in allocations), ZERO)
    shares = allocation_map(allocations)

    deltas = {
        member_id: -amount
        for member_id, amount in shares.items()
        if member_id != payer_id
    }
    deltas[payer_id] = total - shares.get(payer_id, ZERO)
    return deltas


def friend_balance_change(
    allocations: Sequence[Allocation],
    payer_id: str,
    user_id: str,
    friend_id: str,
) -> Decimal:
    """
    Signed change to the user's side of a friend pair.

    If the user paid, the friend owes them the friend's share. If the
    friend paid, the user owes the friend the user's own share. The
    friend's side moves by the negative of this value.
    """
    shares = allocation_map(allocations)
    if payer_id == user_id:
        return shares.get(friend_id, ZERO)
    if payer_id == friend_id:
        return -shares.get(user_id, ZERO)
    raise StaleMembershipError(
        f"Payer {payer_id} is not part of this friendship",
        missing={payer_id},
    )


class LedgerService:
    """
    Commits expenses and applies their balance deltas atomically.

    Unlike the other services, the ledger owns the transaction
    boundary: retrying a conflicted commit requires rolling back and
    re-reading, so it commits or rolls back the session itself.
    """

    def __init__(
        self,
        db: Session,
        max_retries: int | None = None,
        commit_timeout: float | None = None,
        retry_backoff: float | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.max_retries = (
            settings.LEDGER_MAX_RETRIES if max_retries is None else max_retries
        )
        self.commit_timeout = (
            settings.LEDGER_COMMIT_TIMEOUT_SECONDS
            if commit_timeout is None
            else commit_timeout
        )
        self.retry_backoff = (
            settings.LEDGER_RETRY_BACKOFF_SECONDS
            if retry_backoff is None
            else retry_backoff
        )
        self.activity = ActivityService(db)

    def commit_expense(self, draft: ExpenseDraft) -> CommitResult:
        """
        Validate, apply and persist one expense.

        Raises SplitValidationError before touching the database,
        StaleMembershipError when a participant vanished,
        InvariantViolation on a bad delta set, CommitTimeoutError when
        the deadline passes, and ConcurrentUpdateConflict once every
        retry has hit a write conflict. Nothing is written on failure.
        """
        allocations = compute_allocations(
            draft.amount,
            draft.split_method,
            draft.participants,
            draft.inputs_by_member(),
        )
        total = sum((a.amount for a in allocations), ZERO)

        deadline = time.monotonic() + self.commit_timeout
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            self._check_deadline(deadline, attempt)
            try:
                if draft.group_id is not None:
                    result = self._commit_group_expense(
                        draft, allocations, total, deadline, attempt
                    )
                else:
                    result = self._commit_friend_expense(
                        draft, allocations, total, deadline, attempt
                    )
            except StaleDataError:
                self.db.rollback()
                log.warning(
                    "ledger.commit.conflict",
                    attempt=attempt,
                    max_attempts=attempts,
                    group_id=draft.group_id,
                    friend_id=draft.friend_id,
                )
                if attempt < attempts:
                    self._backoff(deadline, attempt)
                continue
            except Exception:
                self.db.rollback()
                raise

            result.attempts = attempt
            log.info(
                "ledger.commit.applied",
                expense_id=str(result.expense_id),
                amount=str(total),
                attempts=attempt,
                group_id=draft.group_id,
                friend_id=draft.friend_id,
            )
            return result

        log.error(
            "ledger.commit.exhausted",
            attempts=attempts,
            group_id=draft.group_id,
            friend_id=draft.friend_id,
        )
        raise ConcurrentUpdateConflict(
            "The balances changed while saving. Please try again.",
            attempts=attempts,
        )

    # --- Group path ---

    def _load_group(self, group_id: int) -> Group | None:
        return self.db.execute(
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.members))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _commit_group_expense(
        self,
        draft: ExpenseDraft,
        allocations: list[Allocation],
        total: Decimal,
        deadline: float,
        attempt: int,
    ) -> CommitResult:
        group = self._load_group(draft.group_id)
        if group is None:
            raise StaleMembershipError(
                f"Group {draft.group_id} no longer exists",
                group_id=draft.group_id,
            )

        members_by_id = {m.member_id: m for m in group.members}
        referenced = {a.member_id for a in allocations} | {draft.payer_id}
        missing = referenced - set(members_by_id)
        if missing:
            raise StaleMembershipError(
                "Some participants are no longer in this group. "
                "Please re-select participants.",
                missing=missing,
            )

        deltas = group_balance_deltas(allocations, draft.payer_id)
        self._check_invariants(total, allocations)
        self._check_zero_sum(deltas)

        for member_id, delta in deltas.items():
            member = members_by_id[member_id]
            member.balance = (member.balance or ZERO) + delta
        group.total_amount = (group.total_amount or ZERO) + total
        group.touch()

        expense = self._write_expense(draft, allocations, total)
        self.db.add(TransactionLogEntry(
            expense=expense,
            group_id=group.id,
            description=draft.description,
            amount=total,
            paid_by=draft.payer_id,
            split_with=[a.member_id for a in allocations],
            category=draft.category,
            entry_date=draft.expense_date,
        ))
        self.activity.record(
            ActivityType.EXPENSE_ADDED,
            draft.created_by,
            group.id,
            expense_id=str(expense.external_id),
            description=draft.description,
            amount=str(total),
        )

        balances = {
            member_id: members_by_id[member_id].balance for member_id in deltas
        }
        self._commit(deadline, attempt)
        return CommitResult(expense_id=expense.external_id, balances=balances)

    # --- Friend path ---

    def _load_friend_entry(
        self, owner_id: str, friend_id: str
    ) -> FriendLedgerEntry | None:
        return self.db.execute(
            select(FriendLedgerEntry)
            .where(
                FriendLedgerEntry.owner_id == owner_id,
                FriendLedgerEntry.friend_id == friend_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _commit_friend_expense(
        self,
        draft: ExpenseDraft,
        allocations: list[Allocation],
        total: Decimal,
        deadline: float,
        attempt: int,
    ) -> CommitResult:
        user_id, friend_id = draft.created_by, draft.friend_id
        user_entry = self._load_friend_entry(user_id, friend_id)
        friend_entry = self._load_friend_entry(friend_id, user_id)
        if user_entry is None or friend_entry is None:
            raise StaleMembershipError(
                f"{friend_id} is no longer a friend of {user_id}",
                friend_id=friend_id,
            )

        parties = {user_id, friend_id}
        referenced = {a.member_id for a in allocations} | {draft.payer_id}
        missing = referenced - parties
        if missing:
            raise StaleMembershipError(
                "A friend expense can only be split between the two friends. "
                "Please re-select participants.",
                missing=missing,
            )

        change = friend_balance_change(
            allocations, draft.payer_id, user_id, friend_id
        )
        self._check_invariants(total, allocations)

        user_entry.net_amount = (user_entry.net_amount or ZERO) + change
        friend_entry.net_amount = (friend_entry.net_amount or ZERO) - change
        if user_entry.net_amount != -friend_entry.net_amount:
            self._violation(
                "Friend entries are no longer exact negatives",
                user_side=str(user_entry.net_amount),
                friend_side=str(friend_entry.net_amount),
            )

        expense = self._write_expense(draft, allocations, total)
        self.db.add(TransactionLogEntry(
            expense=expense,
            friend_pair=pair_key(user_id, friend_id),
            description=draft.description,
            amount=total,
            paid_by=draft.payer_id,
            split_with=[a.member_id for a in allocations],
            category=draft.category,
            entry_date=draft.expense_date,
        ))
        self.activity.record(
            ActivityType.EXPENSE_ADDED,
            user_id,
            friend_id,
            expense_id=str(expense.external_id),
            description=draft.description,
            amount=str(total),
        )

        balances = {
            user_id: user_entry.net_amount,
            friend_id: friend_entry.net_amount,
        }
        self._commit(deadline, attempt)
        return CommitResult(expense_id=expense.external_id, balances=balances)

    # --- Shared steps ---

    def _write_expense(
        self,
        draft: ExpenseDraft,
        allocations: list[Allocation],
        total: Decimal,
    ) -> Expense:
        expense = Expense(
            external_id=uuid.uuid4(),
            description=draft.description,
            amount=total,
            paid_by_id=draft.payer_id,
            split_method=draft.split_method,
            category=draft.category,
            expense_date=draft.expense_date,
            group_id=draft.group_id,
            friend_id=draft.friend_id,
            created_by=draft.created_by,
        )
        for position, allocation in enumerate(allocations):
            expense.split_with.append(ExpenseSplit(
                position=position,
                member_id=allocation.member_id,
                amount=allocation.amount,
                percentage=allocation.percentage,
                shares=allocation.shares,
            ))
        self.db.add(expense)
        return expense

    def _check_invariants(
        self, total: Decimal, allocations: Sequence[Allocation]
    ) -> None:
        if total <= 0:
            self._violation("Expense total must be positive", total=str(total))
        negative = [a.member_id for a in allocations if a.amount < 0]
        if negative:
            self._violation("Negative allocation", members=negative)
        allocated = sum((a.amount for a in allocations), ZERO)
        if allocated != total:
            self._violation(
                "Allocations do not sum to the total",
                total=str(total),
                allocated=str(allocated),
            )

    def _check_zero_sum(self, deltas: dict[str, Decimal]) -> None:
        net = sum(deltas.values(), ZERO)
        if net != 0:
            self._violation("Group deltas do not sum to zero", net=str(net))

    def _violation(self, message: str, **context) -> None:
        log.error("ledger.invariant.violated", reason=message, **context)
        raise InvariantViolation(message, **context)

    def _check_deadline(self, deadline: float, attempt: int) -> None:
        if time.monotonic() >= deadline:
            self.db.rollback()
            log.error("ledger.commit.timeout", attempt=attempt)
            raise CommitTimeoutError(
                "Saving the expense took too long and was not applied. "
                "Please try again.",
                attempt=attempt,
            )

    def _backoff(self, deadline: float, attempt: int) -> None:
        """Sleep a jittered, growing delay that never passes the deadline."""
        delay = random.uniform(0, self.retry_backoff * attempt)
        delay = min(delay, max(0.0, deadline - time.monotonic()))
        if delay > 0:
            time.sleep(delay)

    def _commit(self, deadline: float, attempt: int) -> None:
        self._check_deadline(deadline, attempt)
        self.db.commit()

    # --- Read helpers ---

    def get_expense(self, expense_id) -> Expense:
        expense = self.db.execute(
            select(Expense)
            .where(Expense.external_id == expense_id)
            .options(selectinload(Expense.split_with))
        ).scalar_one_or_none()
        if not expense:
            raise NotFoundError(f"Expense {expense_id} not found")
        return expense

    def check_group_integrity(self, group_id: int) -> dict:
        """
        Verify a group's balances still sum to zero.

        Since every commit is zero-sum, a non-zero total means a
        balance was written outside the ledger.
        """
        balances = self.db.execute(
            select(GroupMember.balance).where(GroupMember.group_id == group_id)
        ).scalars().all()
        total = sum((b or ZERO for b in balances), ZERO)
        return {
            "group_id": group_id,
            "total": total,
            "is_balanced": total == 0,
        }
