"""
Activity log model.

Records what happened in a group or friendship for the activity
feed. Like the transaction log, rows are append-only; the only
change ever made to a row is stamping read_at once its actor has
seen it.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from expense_ledger.models.base import Base
from expense_ledger.models.enums import ActivityType


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[ActivityType] = mapped_column(
        SAEnum(ActivityType, name="activity_type_enum"),
        nullable=False,
    )
    actor_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True
    )
    target_id: Mapped[str] = mapped_column(String(128), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
