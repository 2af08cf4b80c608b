"""
Pydantic schemas for balance roll-ups and the activity feed.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from expense_ledger.models.enums import ActivityType, ExpenseCategory


class ContributionResponse(BaseModel):
    source_type: str
    source_id: str
    name: str
    amount: Decimal

    model_config = {"from_attributes": True}


class GroupStandingResponse(BaseModel):
    group_id: int
    name: str
    balance: Decimal
    direction: str

    model_config = {"from_attributes": True}


class PositionSummaryResponse(BaseModel):
    user_id: str
    net: Decimal
    direction: str
    label: str
    groups: list[ContributionResponse]
    friends: list[ContributionResponse]

    model_config = {"from_attributes": True}


class TimelineEntryResponse(BaseModel):
    expense_id: int
    description: str
    amount: Decimal
    paid_by: str
    split_with: list[str]
    category: ExpenseCategory
    entry_date: date

    model_config = {"from_attributes": True}


class TimelineDayResponse(BaseModel):
    day: date
    total: Decimal
    entries: list[TimelineEntryResponse]

    model_config = {"from_attributes": True}


class CategoryShareResponse(BaseModel):
    category: ExpenseCategory
    amount: Decimal
    percentage: Decimal

    model_config = {"from_attributes": True}


class TimelineResponse(BaseModel):
    days: list[TimelineDayResponse]
    categories: list[CategoryShareResponse]


class ActivityResponse(BaseModel):
    id: int
    event_type: ActivityType
    actor_id: str
    target_id: str
    details: dict
    created_at: datetime
    read_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    user_id: str
    unread: int


class MarkedReadResponse(BaseModel):
    user_id: str
    marked: int
