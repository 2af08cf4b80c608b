"""
Friendship API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from expense_ledger.api.errors import value_http_error
from expense_ledger.api.groups import timeline_response
from expense_ledger.models.base import get_db
from expense_ledger.schemas.friend import FriendEntryResponse, FriendshipCreate
from expense_ledger.schemas.position import TimelineResponse
from expense_ledger.services.friend_service import FriendService
from expense_ledger.services.timeline_service import TimelineService

router = APIRouter(tags=["Friends"])


@router.post("/friends", response_model=FriendEntryResponse, status_code=201)
def add_friend(
    request: FriendshipCreate,
    db: Session = Depends(get_db),
):
    """Create a friendship in both directions, starting at zero."""
    service = FriendService(db)
    try:
        entry = service.add_friend(request)
        db.commit()
        return entry
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.get("/users/{user_id}/friends", response_model=list[FriendEntryResponse])
def list_friends(
    user_id: str,
    db: Session = Depends(get_db),
):
    return FriendService(db).list_friends(user_id)


@router.delete("/users/{user_id}/friends/{friend_id}", status_code=204)
def remove_friend(
    user_id: str,
    friend_id: str,
    db: Session = Depends(get_db),
):
    """Remove a friendship. Rejected while money is outstanding."""
    service = FriendService(db)
    try:
        service.remove_friend(user_id, friend_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)


@router.get(
    "/users/{user_id}/friends/{friend_id}/timeline",
    response_model=TimelineResponse,
)
def friend_timeline(
    user_id: str,
    friend_id: str,
    db: Session = Depends(get_db),
):
    if not FriendService(db).get_entry(user_id, friend_id):
        raise HTTPException(
            status_code=404,
            detail=f"{friend_id} is not a friend of {user_id}",
        )

    days, categories = TimelineService(db).for_friends(user_id, friend_id)
    return timeline_response(days, categories)
