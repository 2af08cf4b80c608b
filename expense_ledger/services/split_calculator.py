"""
Split calculator: turns an expense total and a split method into
per-member allocations.

All arithmetic is done in whole cents so the allocations always sum
to the total exactly:

- equal: the total is divided evenly and leftover cents are handed
  out one at a time starting from the first participant, so 100.00
  over three people is [33.34, 33.33, 33.33].
- percentage / unequal / shares: each exact allocation is truncated
  to cents. Missing cents go one at a time to the participants whose
  allocation was truncated, largest dropped fraction first (ties keep
  participant order). A participant whose input was already exact
  only receives a cent when no truncated one is left. Excess cents
  are taken round-robin from non-zero allocations.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

from expense_ledger.errors import ErrorCode
from expense_ledger.models.enums import SplitMethod
from expense_ledger.services.split_validator import (
    HUNDRED,
    coerce_inputs,
    validate_allocations,
    validate_amounts,
    validate_participants,
    validate_percentages,
    validate_shares,
    validate_total,
)
from expense_ledger.utils.money import (
    ZERO,
    from_cents,
    quantize,
    to_cents,
    truncate,
)


@dataclass(slots=True)
class Allocation:
    member_id: str
    amount: Decimal
    percentage: Decimal
    shares: Decimal | None = None


def split_equally(total: Decimal, count: int) -> list[Decimal]:
    base, remainder = divmod(to_cents(total), count)
    return [
        from_cents(base + (1 if index < remainder else 0))
        for index in range(count)
    ]


def _settle_residual(
    total: Decimal, exact: Sequence[Decimal], weights: Sequence[Decimal]
) -> list[Decimal]:
    amounts = [truncate(value) for value in exact]
    cents = [to_cents(a) for a in amounts]
    residual = to_cents(total) - sum(cents)

    if residual > 0:
        remainders = [value - amount for value, amount in zip(exact, amounts)]
        truncated = sorted(
            (i for i, r in enumerate(remainders) if r > 0),
            key=lambda i: -remainders[i],
        )
        whole = [
            i for i, w in enumerate(weights) if w > 0 and remainders[i] == 0
        ]
        order = truncated + whole or list(range(len(cents)))
        for step in range(residual):
            cents[order[step % len(order)]] += 1

    index = 0
    while residual < 0:
        if cents[index] > 0:
            cents[index] -= 1
            residual += 1
        index = (index + 1) % len(cents)

    return [from_cents(c) for c in cents]


def apportion(
    total: Decimal, weights: Sequence[Decimal], divisor: Decimal
) -> list[Decimal]:
    """Allocate total proportionally to weight / divisor, exact to the cent."""
    exact = [total * weight / divisor for weight in weights]
    return _settle_residual(total, exact, weights)



def _percentage_of(amount: Decimal, total: Decimal) -> Decimal:
    return quantize(amount * HUNDRED / total)


def compute_allocations(
    total_amount,
    method: SplitMethod,
    participants: Sequence[str],
    inputs: Mapping[str, object] | None = None,
) -> list[Allocation]:
    """
    Compute validated allocations for one expense.

    ``inputs`` maps member id to the raw per-member value: a
    percentage, a literal amount, or a share weight depending on
    the method. It is ignored for equal splits; a participant with
    no input counts as zero.

    Raises SplitValidationError; never performs I/O.
    """
    total = validate_total(total_amount)
    members = validate_participants(participants)
    inputs = inputs or {}
    method = SplitMethod(method)

    shares: list[Decimal] | None = None
    if method == SplitMethod.EQUAL:
        amounts = split_equally(total, len(members))
        percentages = [_percentage_of(a, total) for a in amounts]

    elif method == SplitMethod.PERCENTAGE:
        values = coerce_inputs(
            [inputs.get(m, ZERO) for m in members],
            ErrorCode.PERCENTAGE_MISMATCH,
            "Percentage",
        )
        validate_percentages(values)
        amounts = apportion(total, values, HUNDRED)
        percentages = [quantize(v) for v in values]

    elif method == SplitMethod.UNEQUAL:
        values = coerce_inputs(
            [inputs.get(m, ZERO) for m in members],
            ErrorCode.AMOUNT_MISMATCH,
            "Amount",
        )
        validate_amounts(total, values)
        amounts = apportion(total, values, total)
        percentages = [_percentage_of(a, total) for a in amounts]

    elif method == SplitMethod.SHARES:
        shares = coerce_inputs(
            [inputs.get(m, ZERO) for m in members],
            ErrorCode.INVALID_SHARES,
            "Share",
        )
        total_shares = validate_shares(shares)
        amounts = apportion(total, shares, total_shares)
        percentages = [_percentage_of(a, total) for a in amounts]

    else:  # pragma: no cover - SplitMethod() already rejected it
        raise ValueError(f"Unsupported split method: {method}")

    allocations = [
        Allocation(
            member_id=member_id,
            amount=amount,
            percentage=percentage,
            shares=shares[index] if shares is not None else None,
        )
        for index, (member_id, amount, percentage) in enumerate(
            zip(members, amounts, percentages)
        )
    ]
    validate_allocations(total, allocations)
    return allocations


def allocation_map(allocations: Sequence[Allocation]) -> dict[str, Decimal]:
    return {a.member_id: a.amount for a in allocations}
