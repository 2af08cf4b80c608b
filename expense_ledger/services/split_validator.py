"""
Split validator: checks that split inputs and the resulting
allocations reconcile with the expense total.

Every check is pure and raises SplitValidationError with a reason
code. Nothing here touches the database, so a rejected split never
has side effects.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Sequence

from expense_ledger.config import get_settings
from expense_ledger.errors import ErrorCode, SplitValidationError
from expense_ledger.utils.money import ZERO, quantize, to_decimal

HUNDRED = Decimal("100")


def _tolerance(tolerance: Decimal | None) -> Decimal:
    return tolerance if tolerance is not None else get_settings().SPLIT_TOLERANCE


def validate_total(total_amount) -> Decimal:
    """Return the total quantized to cents; it must be positive."""
    try:
        total = quantize(to_decimal(total_amount))
    except InvalidOperation:
        raise SplitValidationError(
            ErrorCode.NON_POSITIVE_TOTAL,
            f"Expense amount {total_amount!r} is not a number",
        )
    if total <= ZERO:
        raise SplitValidationError(
            ErrorCode.NON_POSITIVE_TOTAL,
            f"Expense amount must be positive, got {total}",
            amount=str(total),
        )
    return total


def validate_participants(participants: Iterable[str]) -> list[str]:
    """De-duplicate participants, keeping first positions."""
    seen: list[str] = []
    for member_id in participants:
        if member_id and member_id not in seen:
            seen.append(member_id)
    if not seen:
        raise SplitValidationError(
            ErrorCode.EMPTY_SELECTION,
            "Select at least one person to split with",
        )
    return seen


def coerce_inputs(
    values: Sequence, code: ErrorCode, label: str
) -> list[Decimal]:
    """Convert raw inputs to Decimal, rejecting non-numeric and negative values."""
    result = []
    for value in values:
        try:
            number = to_decimal(value)
        except InvalidOperation:
            raise SplitValidationError(code, f"{label} {value!r} is not a number")
        if number < 0:
            raise SplitValidationError(
                code, f"{label} cannot be negative, got {number}"
            )
        result.append(number)
    return result


def validate_percentages(
    percentages: Sequence[Decimal], tolerance: Decimal | None = None
) -> Decimal:
    total = sum(percentages, ZERO)
    if abs(total - HUNDRED) >= _tolerance(tolerance):
        raise SplitValidationError(
            ErrorCode.PERCENTAGE_MISMATCH,
            f"Percentages must add up to 100%, got {total}%",
            total=str(total),
        )
    return total


def validate_amounts(
    total_amount: Decimal,
    amounts: Sequence[Decimal],
    tolerance: Decimal | None = None,
) -> Decimal:
    total = sum(amounts, ZERO)
    if abs(total - total_amount) >= _tolerance(tolerance):
        raise SplitValidationError(
            ErrorCode.AMOUNT_MISMATCH,
            f"Amounts must add up to {total_amount}, got {total}",
            expected=str(total_amount),
            actual=str(total),
        )
    return total


def validate_shares(shares: Sequence[Decimal]) -> Decimal:
    total = sum(shares, ZERO)
    if total <= 0:
        raise SplitValidationError(
            ErrorCode.INVALID_SHARES,
            "At least one participant needs a share greater than zero",
        )
    return total


def validate_allocations(
    total_amount: Decimal, allocations, tolerance: Decimal | None = None
) -> None:
    """
    Final reconciliation of computed allocations against the total.

    Allocations must be non-negative and sum to the total within the
    tolerance. The calculator produces exact sums, so this only fires
    on a bug or on hand-built allocations.
    """
    for allocation in allocations:
        if allocation.amount < 0:
            raise SplitValidationError(
                ErrorCode.AMOUNT_MISMATCH,
                f"Allocation for {allocation.member_id} is negative",
                member_id=allocation.member_id,
            )
    validate_amounts(
        total_amount, [a.amount for a in allocations], tolerance=tolerance
    )
