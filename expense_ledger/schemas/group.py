"""
Pydantic schemas for groups and members.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class MemberCreate(BaseModel):
    member_id: str = Field(min_length=1, max_length=128)
    display_name: str = Field(min_length=1, max_length=100)
    is_admin: bool = False


class GroupCreate(BaseModel):
    """Request to create a group. The creator joins as an admin."""
    name: str = Field(min_length=1, max_length=100)
    group_type: str = Field(default="other", max_length=50)
    created_by: str = Field(min_length=1, max_length=128)
    creator_name: str = Field(min_length=1, max_length=100)
    members: list[MemberCreate] = Field(default_factory=list)


class MembersAdd(BaseModel):
    added_by: str = Field(min_length=1, max_length=128)
    members: list[MemberCreate] = Field(min_length=1)


class AdminUpdate(BaseModel):
    changed_by: str = Field(min_length=1, max_length=128)
    is_admin: bool = True


class MemberResponse(BaseModel):
    member_id: str
    display_name: str
    balance: Decimal
    is_admin: bool

    model_config = {"from_attributes": True}


class GroupResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    name: str
    group_type: str
    created_by: str
    total_amount: Decimal
    created_at: datetime
    members: list[MemberResponse]

    model_config = {"from_attributes": True}
