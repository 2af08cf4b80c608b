"""
Pydantic schemas for friendships.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class FriendshipCreate(BaseModel):
    user_id: str = Field(min_length=1, max_length=128)
    user_name: str = Field(min_length=1, max_length=100)
    friend_id: str = Field(min_length=1, max_length=128)
    friend_name: str = Field(min_length=1, max_length=100)


class FriendEntryResponse(BaseModel):
    owner_id: str
    friend_id: str
    friend_name: str
    net_amount: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}
