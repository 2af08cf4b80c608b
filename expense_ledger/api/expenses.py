"""
Expense API endpoints.

Previewing a split is pure and touches no tables. Committing an
expense goes through LedgerService, which owns its own commit and
rollback, so these endpoints only translate errors.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from expense_ledger.api.errors import ledger_http_error
from expense_ledger.errors import LedgerError, NotFoundError
from expense_ledger.models.base import get_db
from expense_ledger.schemas.expense import (
    CommitResponse,
    ExpenseDraft,
    ExpenseResponse,
)
from expense_ledger.schemas.split import (
    AllocationResponse,
    SplitPreviewRequest,
    SplitPreviewResponse,
)
from expense_ledger.services.ledger_service import LedgerService
from expense_ledger.services.split_calculator import compute_allocations

router = APIRouter(tags=["Expenses"])


@router.post("/splits/preview", response_model=SplitPreviewResponse)
def preview_split(request: SplitPreviewRequest):
    """Show how an amount would be divided, without saving anything."""
    try:
        allocations = compute_allocations(
            request.amount,
            request.split_method,
            request.participants,
            request.inputs_by_member(),
        )
    except LedgerError as e:
        raise ledger_http_error(e)

    return SplitPreviewResponse(
        amount=sum(a.amount for a in allocations),
        split_method=request.split_method,
        allocations=[AllocationResponse.model_validate(a) for a in allocations],
    )


@router.post("/expenses", response_model=CommitResponse, status_code=201)
def commit_expense(
    draft: ExpenseDraft,
    db: Session = Depends(get_db),
):
    """
    Record an expense and update balances atomically.

    Either every balance, the expense and its log entries are
    saved, or nothing is. Error responses carry a ``code`` that
    says which check failed.
    """
    try:
        result = LedgerService(db).commit_expense(draft)
    except LedgerError as e:
        raise ledger_http_error(e)

    return CommitResponse(expense_id=result.expense_id, balances=result.balances)


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        return LedgerService(db).get_expense(expense_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
