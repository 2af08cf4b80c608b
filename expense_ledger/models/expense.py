"""
Expense model.

An expense belongs to exactly one context: a group or a friend
pair. The check constraint enforces that at the database level.
Expenses are append-only; nothing updates or deletes them.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Integer, Numeric, ForeignKey,
    CheckConstraint, Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_ledger.models.base import Base
from expense_ledger.models.enums import SplitMethod, ExpenseCategory


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint(
            "(group_id IS NULL) <> (friend_id IS NULL)",
            name="ck_expense_single_context",
        ),
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_by_id: Mapped[str] = mapped_column(String(128), nullable=False)
    split_method: Mapped[SplitMethod] = mapped_column(
        SAEnum(
            SplitMethod,
            name="split_method_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    category: Mapped[ExpenseCategory] = mapped_column(
        SAEnum(
            ExpenseCategory,
            name="expense_category_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=ExpenseCategory.OTHER,
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    group_id: Mapped[int | None] = mapped_column(
        ForeignKey("groups.id"), nullable=True, index=True
    )
    friend_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    split_with: Mapped[list["ExpenseSplit"]] = relationship(
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.position",
    )

    def __repr__(self) -> str:
        return (
            f"<Expense {self.external_id} {self.amount} "
            f"({self.split_method.value})>"
        )


class ExpenseSplit(Base):
    """One participant's share of an expense, in submission order."""

    __tablename__ = "expense_splits"

    id: Mapped[int] = mapped_column(primary_key=True)
    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    member_id: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    shares: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 4), nullable=True
    )

    expense: Mapped["Expense"] = relationship(back_populates="split_with")
