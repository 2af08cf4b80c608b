"""
Pydantic schemas for split calculation.

Split inputs are deliberately unconstrained here: sign and sum
checks belong to the split validator, which reports them with a
reason code instead of a generic schema error.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from expense_ledger.models.enums import SplitMethod


class SplitInput(BaseModel):
    """One participant's raw input: a percentage, amount, or share weight."""
    member_id: str = Field(min_length=1, max_length=128)
    value: Decimal


def reject_duplicate_inputs(inputs: list[SplitInput]) -> None:
    seen = set()
    for item in inputs:
        if item.member_id in seen:
            raise ValueError(f"duplicate split input for {item.member_id}")
        seen.add(item.member_id)


class SplitPreviewRequest(BaseModel):
    amount: Decimal
    split_method: SplitMethod = SplitMethod.EQUAL
    participants: list[str]
    split_inputs: list[SplitInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def one_input_per_member(self) -> "SplitPreviewRequest":
        reject_duplicate_inputs(self.split_inputs)
        return self

    def inputs_by_member(self) -> dict[str, Decimal]:
        return {i.member_id: i.value for i in self.split_inputs}


class AllocationResponse(BaseModel):
    member_id: str
    amount: Decimal
    percentage: Decimal
    shares: Decimal | None = None

    model_config = {"from_attributes": True}


class SplitPreviewResponse(BaseModel):
    amount: Decimal
    split_method: SplitMethod
    allocations: list[AllocationResponse]
