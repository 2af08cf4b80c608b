"""
Activity service: the append-only feed of group, friend and
expense events.

Records are added inside the caller's transaction, so an activity
row exists exactly when the change it describes was committed.
Each row also carries read_at, set once its actor has seen it.
"""

import json
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from expense_ledger.errors import NotFoundError
from expense_ledger.logging import get_logger
from expense_ledger.models.activity_log import ActivityLog
from expense_ledger.models.enums import ActivityType

log = get_logger(__name__)


class ActivityService:

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        event_type: ActivityType,
        actor_id: str,
        target_id: str,
        **details,
    ) -> ActivityLog:
        entry = ActivityLog(
            event_type=event_type,
            actor_id=actor_id,
            target_id=str(target_id),
            details=json.dumps(details, default=str, sort_keys=True),
        )
        self.db.add(entry)
        return entry

    def recent_for(self, actor_id: str, limit: int = 50) -> list[ActivityLog]:
        """Return an actor's activity, newest first."""
        entries = self.db.execute(
            select(ActivityLog)
            .where(ActivityLog.actor_id == actor_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
        ).scalars().all()
        return list(entries)

    def mark_read(self, actor_id: str, activity_id: int) -> ActivityLog:
        """
        Mark one of an actor's activities as read.

        Marking an already-read activity keeps its original read_at.
        """
        entry = self.db.execute(
            select(ActivityLog).where(
                ActivityLog.id == activity_id,
                ActivityLog.actor_id == actor_id,
            )
        ).scalar_one_or_none()
        if not entry:
            raise NotFoundError(
                f"Activity {activity_id} not found for {actor_id}"
            )
        if entry.read_at is None:
            entry.read_at = datetime.utcnow()
            self.db.flush()
        return entry

    def mark_all_read(self, actor_id: str) -> int:
        """Mark every unread activity of an actor as read. Returns the count."""
        result = self.db.execute(
            update(ActivityLog)
            .where(
                ActivityLog.actor_id == actor_id,
                ActivityLog.read_at.is_(None),
            )
            .values(read_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        log.info("activity.marked_read", actor_id=actor_id, count=result.rowcount)
        return result.rowcount

    def unread_count(self, actor_id: str) -> int:
        return self.db.execute(
            select(func.count(ActivityLog.id)).where(
                ActivityLog.actor_id == actor_id,
                ActivityLog.read_at.is_(None),
            )
        ).scalar_one()
