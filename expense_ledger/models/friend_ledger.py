"""
Pairwise friend ledger.

A friendship is stored as two directed entries, (A -> B) and
(B -> A). ``net_amount`` is the owner's position against the friend,
so the two rows are always exact negatives of each other. Both rows
are versioned; the ledger writes both in every friend commit.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Integer, Numeric, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from expense_ledger.models.base import Base


def pair_key(user_id: str, friend_id: str) -> str:
    """Order-independent key for a friend pair."""
    return "|".join(sorted((user_id, friend_id)))


class FriendLedgerEntry(Base):
    __tablename__ = "friend_ledger_entries"
    __table_args__ = (
        UniqueConstraint("owner_id", "friend_id", name="uq_friend_entry"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    friend_id: Mapped[str] = mapped_column(String(128), nullable=False)
    friend_name: Mapped[str] = mapped_column(String(100), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<FriendLedgerEntry {self.owner_id}->{self.friend_id} "
            f"{self.net_amount}>"
        )
