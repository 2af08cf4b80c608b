"""
Transaction log model.

A denormalized, write-once copy of each expense, shaped for
timeline rendering. Rows are keyed by group or by friend pair so
a timeline is a single indexed read.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, JSON,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_ledger.models.base import Base
from expense_ledger.models.enums import ExpenseCategory


class TransactionLogEntry(Base):
    __tablename__ = "transaction_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    expense_id: Mapped[int] = mapped_column(
        ForeignKey("expenses.id"), unique=True, nullable=False
    )
    group_id: Mapped[int | None] = mapped_column(
        ForeignKey("groups.id"), nullable=True, index=True
    )
    friend_pair: Mapped[str | None] = mapped_column(
        String(257), nullable=True, index=True
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_by: Mapped[str] = mapped_column(String(128), nullable=False)
    split_with: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    category: Mapped[ExpenseCategory] = mapped_column(
        SAEnum(ExpenseCategory, name="expense_category_enum"),
        nullable=False,
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    expense: Mapped["Expense"] = relationship()

    def __repr__(self) -> str:
        return f"<TransactionLogEntry {self.entry_date} {self.amount}>"
