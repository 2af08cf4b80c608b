"""
Ledger error taxonomy.

Every failure the ledger can report carries a machine-checkable
``code`` so callers can render a precise message without parsing
text. Validation and membership errors are also ValueErrors, which
keeps them compatible with the plain ``except ValueError`` handling
used by the group and friend services.
"""

import enum
from typing import Any


class ErrorCode(str, enum.Enum):
    # Split validation
    EMPTY_SELECTION = "empty-selection"
    NON_POSITIVE_TOTAL = "non-positive-total"
    PERCENTAGE_MISMATCH = "percentage-mismatch"
    AMOUNT_MISMATCH = "amount-mismatch"
    INVALID_SHARES = "invalid-shares"

    # Ledger
    STALE_MEMBERSHIP = "stale-membership"
    CONCURRENT_UPDATE_CONFLICT = "concurrent-update-conflict"
    COMMIT_TIMEOUT = "commit-timeout"
    INVARIANT_VIOLATION = "invariant-violation"

    # Aggregation
    MALFORMED_BALANCE = "malformed-balance"


class NotFoundError(ValueError):
    """A group, member, friendship, expense or activity does not exist."""


class LedgerError(Exception):
    """Base class for all tagged ledger errors."""

    code: ErrorCode

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.context:
            payload["context"] = {
                key: sorted(value) if isinstance(value, set) else value
                for key, value in self.context.items()
            }
        return payload


class SplitValidationError(LedgerError, ValueError):
    """A split request does not reconcile. Raised before any I/O."""

    def __init__(self, code: ErrorCode, message: str, **context: Any):
        super().__init__(message, **context)
        self.code = code


class StaleMembershipError(LedgerError, ValueError):
    """A referenced participant vanished between allocation and commit."""

    code = ErrorCode.STALE_MEMBERSHIP


class ConcurrentUpdateConflict(LedgerError):
    """Write conflicts persisted after every retry was spent."""

    code = ErrorCode.CONCURRENT_UPDATE_CONFLICT


class CommitTimeoutError(LedgerError):
    """The commit deadline passed before the transaction committed."""

    code = ErrorCode.COMMIT_TIMEOUT


class InvariantViolation(LedgerError):
    """Computed deltas break a ledger invariant. Indicates a defect."""

    code = ErrorCode.INVARIANT_VIOLATION


class MalformedBalanceError(LedgerError):
    """A stored balance could not be read as a number."""

    code = ErrorCode.MALFORMED_BALANCE
