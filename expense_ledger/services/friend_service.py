"""
Friend service: establishes and removes pairwise friendships.

A friendship is two FriendLedgerEntry rows, one per direction,
created together at zero and removed together.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_ledger.errors import NotFoundError
from expense_ledger.logging import get_logger
from expense_ledger.models.enums import ActivityType
from expense_ledger.models.friend_ledger import FriendLedgerEntry
from expense_ledger.schemas.friend import FriendshipCreate
from expense_ledger.services.activity_service import ActivityService

log = get_logger(__name__)


class FriendService:

    def __init__(self, db: Session):
        self.db = db
        self.activity = ActivityService(db)

    def get_entry(self, owner_id: str, friend_id: str) -> FriendLedgerEntry | None:
        return self.db.execute(
            select(FriendLedgerEntry).where(
                FriendLedgerEntry.owner_id == owner_id,
                FriendLedgerEntry.friend_id == friend_id,
            )
        ).scalar_one_or_none()

    def add_friend(self, request: FriendshipCreate) -> FriendLedgerEntry:
        """
        Create both directions of a friendship.

        Returns the requesting user's entry.
        """
        if request.user_id == request.friend_id:
            raise ValueError("Cannot add yourself as a friend")

        if self.get_entry(request.user_id, request.friend_id):
            raise ValueError(
                f"{request.friend_id} is already a friend of {request.user_id}"
            )

        own_entry = FriendLedgerEntry(
            owner_id=request.user_id,
            friend_id=request.friend_id,
            friend_name=request.friend_name,
        )
        reverse_entry = FriendLedgerEntry(
            owner_id=request.friend_id,
            friend_id=request.user_id,
            friend_name=request.user_name,
        )
        self.db.add_all([own_entry, reverse_entry])
        self.activity.record(
            ActivityType.FRIEND_ADDED,
            request.user_id,
            request.friend_id,
            friend_name=request.friend_name,
        )
        self.db.flush()
        log.info(
            "friend.added",
            user_id=request.user_id,
            friend_id=request.friend_id,
        )
        return own_entry

    def remove_friend(self, user_id: str, friend_id: str) -> None:
        """Remove both directions; rejected while money is outstanding."""
        own_entry = self.get_entry(user_id, friend_id)
        reverse_entry = self.get_entry(friend_id, user_id)
        if not own_entry or not reverse_entry:
            raise NotFoundError(f"{friend_id} is not a friend of {user_id}")

        if own_entry.net_amount != 0:
            raise ValueError(
                f"Cannot remove {friend_id}: outstanding balance of "
                f"{own_entry.net_amount}"
            )

        self.db.delete(own_entry)
        self.db.delete(reverse_entry)
        self.activity.record(ActivityType.FRIEND_REMOVED, user_id, friend_id)
        self.db.flush()
        log.info("friend.removed", user_id=user_id, friend_id=friend_id)

    def list_friends(self, user_id: str) -> list[FriendLedgerEntry]:
        entries = self.db.execute(
            select(FriendLedgerEntry)
            .where(FriendLedgerEntry.owner_id == user_id)
            .order_by(FriendLedgerEntry.friend_name)
        ).scalars().all()
        return list(entries)
