"""
Group service: creates groups and manages their membership.

Members always join with a zero balance. This service never
changes a balance; that is the ledger's job. Membership changes
write the group row so that a ledger commit racing with them sees
a version conflict and re-reads the member list.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from expense_ledger.errors import NotFoundError
from expense_ledger.logging import get_logger
from expense_ledger.models.enums import ActivityType
from expense_ledger.models.group import Group, GroupMember
from expense_ledger.schemas.group import GroupCreate, MemberCreate
from expense_ledger.services.activity_service import ActivityService

log = get_logger(__name__)


class GroupService:

    def __init__(self, db: Session):
        self.db = db
        self.activity = ActivityService(db)

    def create_group(self, request: GroupCreate) -> Group:
        """
        Create a group with its creator as the first admin member.

        Listed members are de-duplicated by member_id; the creator
        is never added twice.
        """
        group = Group(
            name=request.name,
            group_type=request.group_type,
            created_by=request.created_by,
        )
        group.members.append(GroupMember(
            member_id=request.created_by,
            display_name=request.creator_name,
            is_admin=True,
        ))

        seen = {request.created_by}
        for member in request.members:
            if member.member_id in seen:
                continue
            seen.add(member.member_id)
            group.members.append(GroupMember(
                member_id=member.member_id,
                display_name=member.display_name,
                is_admin=member.is_admin,
            ))

        self.db.add(group)
        self.db.flush()

        self.activity.record(
            ActivityType.GROUP_CREATED,
            request.created_by,
            group.id,
            name=group.name,
            members=len(group.members),
        )
        self.db.flush()
        log.info("group.created", group_id=group.id, members=len(group.members))
        return group

    def get_group(self, group_id: int) -> Group:
        """Get a group with its members."""
        group = self.db.execute(
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.members))
        ).scalar_one_or_none()
        if not group:
            raise NotFoundError(f"Group {group_id} not found")
        return group

    def get_members(self, group_id: int) -> list[GroupMember]:
        return list(self.get_group(group_id).members)

    def add_members(
        self, group_id: int, members: list[MemberCreate], actor_id: str
    ) -> list[GroupMember]:
        """
        Add members to a group, skipping anyone already in it.

        Returns only the members that were actually added.
        """
        group = self.get_group(group_id)
        existing = {m.member_id for m in group.members}

        added = []
        for member in members:
            if member.member_id in existing:
                continue
            existing.add(member.member_id)
            new_member = GroupMember(
                member_id=member.member_id,
                display_name=member.display_name,
                is_admin=member.is_admin,
            )
            group.members.append(new_member)
            added.append(new_member)

        if not added:
            return []

        group.touch()
        for member in added:
            self.activity.record(
                ActivityType.MEMBER_ADDED,
                actor_id,
                group.id,
                member_id=member.member_id,
            )
        self.db.flush()
        log.info("group.members.added", group_id=group.id, added=len(added))
        return added

    def remove_member(self, group_id: int, member_id: str, actor_id: str) -> None:
        """
        Remove a member from a group.

        Rejected while the member still owes or is owed money,
        since dropping them would break the group's zero sum.
        """
        group = self.get_group(group_id)
        member = next(
            (m for m in group.members if m.member_id == member_id), None
        )
        if not member:
            raise NotFoundError(f"Member {member_id} not found in group {group_id}")

        if (member.balance or Decimal("0")) != 0:
            raise ValueError(
                f"Member {member_id} has an outstanding balance of {member.balance}"
            )

        group.members.remove(member)
        group.touch()
        self.activity.record(
            ActivityType.MEMBER_REMOVED,
            actor_id,
            group.id,
            member_id=member_id,
        )
        self.db.flush()
        log.info("group.member.removed", group_id=group.id, member_id=member_id)

    def set_admin(
        self, group_id: int, member_id: str, is_admin: bool, actor_id: str
    ) -> GroupMember:
        """Grant or revoke a member's admin flag."""
        group = self.get_group(group_id)
        member = next(
            (m for m in group.members if m.member_id == member_id), None
        )
        if not member:
            raise NotFoundError(f"Member {member_id} not found in group {group_id}")

        if member.is_admin == is_admin:
            return member

        member.is_admin = is_admin
        group.touch()
        self.activity.record(
            ActivityType.ADMIN_CHANGED,
            actor_id,
            group.id,
            member_id=member_id,
            is_admin=is_admin,
        )
        self.db.flush()
        log.info(
            "group.admin.changed",
            group_id=group.id,
            member_id=member_id,
            is_admin=is_admin,
        )
        return member

    def has_outstanding_balance(self, group_id: int, member_id: str) -> bool:
        """True when the member owes or is owed money in the group."""
        member = self.db.execute(
            select(GroupMember).where(
                GroupMember.group_id == group_id,
                GroupMember.member_id == member_id,
            )
        ).scalar_one_or_none()
        if not member:
            return False
        return (member.balance or Decimal("0")) != 0
