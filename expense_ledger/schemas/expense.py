"""
Pydantic schemas for expense submission.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from expense_ledger.models.enums import SplitMethod, ExpenseCategory
from expense_ledger.schemas.split import (
    AllocationResponse,
    SplitInput,
    reject_duplicate_inputs,
)


class ExpenseDraft(BaseModel):
    """
    An expense as collected from the user, before allocation.

    Exactly one of group_id and friend_id must be set. For a friend
    expense, created_by is the current user and friend_id the other
    side of the pair.
    """
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal
    payer_id: str = Field(min_length=1, max_length=128)
    split_method: SplitMethod = SplitMethod.EQUAL
    participants: list[str]
    split_inputs: list[SplitInput] = Field(default_factory=list)
    group_id: int | None = None
    friend_id: str | None = Field(default=None, max_length=128)
    category: ExpenseCategory = ExpenseCategory.OTHER
    expense_date: date = Field(default_factory=date.today)
    created_by: str = Field(min_length=1, max_length=128)

    @model_validator(mode="after")
    def exactly_one_context(self) -> "ExpenseDraft":
        if (self.group_id is None) == (self.friend_id is None):
            raise ValueError("expense must belong to exactly one group or friend")
        if self.friend_id is not None and self.friend_id == self.created_by:
            raise ValueError("friend_id must differ from created_by")
        reject_duplicate_inputs(self.split_inputs)
        return self

    def inputs_by_member(self) -> dict[str, Decimal]:
        return {i.member_id: i.value for i in self.split_inputs}


class CommitResponse(BaseModel):
    expense_id: uuid.UUID
    balances: dict[str, Decimal]


class ExpenseResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    description: str
    amount: Decimal
    paid_by_id: str
    split_method: SplitMethod
    category: ExpenseCategory
    expense_date: date
    group_id: int | None
    friend_id: str | None
    created_by: str
    created_at: datetime
    split_with: list[AllocationResponse]

    model_config = {"from_attributes": True}
