"""
Translation of service errors into HTTP responses.
"""

from fastapi import HTTPException

from expense_ledger.errors import ErrorCode, LedgerError, NotFoundError

STATUS_BY_CODE = {
    ErrorCode.EMPTY_SELECTION: 400,
    ErrorCode.NON_POSITIVE_TOTAL: 400,
    ErrorCode.PERCENTAGE_MISMATCH: 400,
    ErrorCode.AMOUNT_MISMATCH: 400,
    ErrorCode.INVALID_SHARES: 400,
    ErrorCode.STALE_MEMBERSHIP: 409,
    ErrorCode.CONCURRENT_UPDATE_CONFLICT: 503,
    ErrorCode.COMMIT_TIMEOUT: 503,
    ErrorCode.INVARIANT_VIOLATION: 500,
    ErrorCode.MALFORMED_BALANCE: 500,
}


def ledger_http_error(exc: LedgerError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_CODE.get(exc.code, 500),
        detail=exc.to_dict(),
    )


def value_http_error(exc: ValueError) -> HTTPException:
    """Plain ValueErrors: 404 for missing records, 400 otherwise."""
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    return HTTPException(status_code=status_code, detail=str(exc))
