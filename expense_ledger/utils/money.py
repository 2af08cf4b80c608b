"""
Money helpers.

All amounts are Decimal and are quantized to whole cents with
ROUND_HALF_UP. Floats never enter the ledger.
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert a stored or user-supplied value to Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its
    binary approximation. Raises InvalidOperation for non-numeric input.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidOperation(f"Not a monetary value: {value!r}")
    elif isinstance(value, (int, float, str)):
        result = Decimal(str(value).strip())
    else:
        raise InvalidOperation(f"Not a monetary value: {value!r}")
    if not result.is_finite():
        raise InvalidOperation(f"Not a finite value: {value!r}")
    return result


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def truncate(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_DOWN)


def to_cents(amount: Decimal) -> int:
    return int(quantize(amount) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_currency(amount: Decimal, symbol: str = "₹") -> str:
    """
    Format an amount for display.

    Whole amounts show no decimals ("₹100"), others show two
    ("₹100.50"). The sign is dropped; callers phrase direction
    in words ("you owe", "you are owed").
    """
    value = quantize(abs(amount))
    if value == value.to_integral_value():
        return f"{symbol}{value.quantize(Decimal('1'))}"
    return f"{symbol}{value}"
