"""
Group API endpoints.

Thin HTTP layer over GroupService and TimelineService. Each
write endpoint commits on success and rolls back on error.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expense_ledger.api.errors import value_http_error
from expense_ledger.models.base import get_db
from expense_ledger.schemas.group import (
    AdminUpdate,
    GroupCreate,
    GroupResponse,
    MemberResponse,
    MembersAdd,
)
from expense_ledger.schemas.position import (
    CategoryShareResponse,
    TimelineDayResponse,
    TimelineResponse,
)
from expense_ledger.services.group_service import GroupService
from expense_ledger.services.timeline_service import TimelineService

router = APIRouter(prefix="/groups", tags=["Groups"])


def timeline_response(days, categories) -> TimelineResponse:
    return TimelineResponse(
        days=[TimelineDayResponse.model_validate(d) for d in days],
        categories=[CategoryShareResponse.model_validate(c) for c in categories],
    )


@router.post("", response_model=GroupResponse, status_code=201)
def create_group(
    request: GroupCreate,
    db: Session = Depends(get_db),
):
    """Create a group. The creator joins as its first admin."""
    service = GroupService(db)
    try:
        group = service.create_group(request)
        db.commit()
        return service.get_group(group.id)
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.get("/{group_id}", response_model=GroupResponse)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
):
    service = GroupService(db)
    try:
        return service.get_group(group_id)
    except ValueError as e:
        raise value_http_error(e)


@router.post(
    "/{group_id}/members",
    response_model=list[MemberResponse],
    status_code=201,
)
def add_members(
    group_id: int,
    request: MembersAdd,
    db: Session = Depends(get_db),
):
    """
    Add members to a group.

    Members already in the group are skipped; the response lists
    only the ones that were added.
    """
    service = GroupService(db)
    try:
        added = service.add_members(group_id, request.members, request.added_by)
        db.commit()
        return added
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.delete("/{group_id}/members/{member_id}", status_code=204)
def remove_member(
    group_id: int,
    member_id: str,
    removed_by: str,
    db: Session = Depends(get_db),
):
    """Remove a member. Rejected while they have an outstanding balance."""
    service = GroupService(db)
    try:
        service.remove_member(group_id, member_id, removed_by)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.put(
    "/{group_id}/members/{member_id}/admin",
    response_model=MemberResponse,
)
def set_admin(
    group_id: int,
    member_id: str,
    request: AdminUpdate,
    db: Session = Depends(get_db),
):
    """Grant or revoke a member's admin rights."""
    service = GroupService(db)
    try:
        member = service.set_admin(
            group_id, member_id, request.is_admin, request.changed_by
        )
        db.commit()
        return member
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.get("/{group_id}/timeline", response_model=TimelineResponse)
def group_timeline(
    group_id: int,
    db: Session = Depends(get_db),
):
    try:
        GroupService(db).get_group(group_id)
    except ValueError as e:
        raise value_http_error(e)

    days, categories = TimelineService(db).for_group(group_id)
    return timeline_response(days, categories)
