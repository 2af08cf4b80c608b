"""
Group and member models.

A group owns its members. Each member carries a signed balance:
positive means the member is owed money, negative means they owe.

The group row carries a version counter. Every ledger commit and
every membership change writes the group row, so two writers that
read the same version cannot both commit: the second UPDATE matches
no rows and SQLAlchemy raises StaleDataError.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Integer, Numeric, ForeignKey,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_ledger.models.base import Base


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    group_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="other"
    )
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    members: Mapped[list["GroupMember"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.id",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def touch(self) -> None:
        """Mark the group as written so its version advances."""
        self.updated_at = datetime.utcnow()

    def __repr__(self) -> str:
        return f"<Group {self.id} {self.name!r} v{self.version_id}>"


class GroupMember(Base):
    """
    A participant in one group.

    Only LedgerService changes ``balance``; members are created
    at zero and never edited by any other path.
    """

    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "member_id", name="uq_group_member"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    group: Mapped["Group"] = relationship(back_populates="members")

    def __repr__(self) -> str:
        return f"<GroupMember {self.member_id} balance={self.balance}>"
