"""
Per-user endpoints: net position, group standings and the
activity feed with its read state.
"""

import json
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from expense_ledger.api.errors import ledger_http_error, value_http_error
from expense_ledger.errors import MalformedBalanceError
from expense_ledger.models.base import get_db
from expense_ledger.schemas.position import (
    ActivityResponse,
    GroupStandingResponse,
    MarkedReadResponse,
    PositionSummaryResponse,
    UnreadCountResponse,
)
from expense_ledger.services.activity_service import ActivityService
from expense_ledger.services.balance_aggregator import BalanceAggregator

router = APIRouter(prefix="/users", tags=["Positions"])


def activity_response(entry) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        event_type=entry.event_type,
        actor_id=entry.actor_id,
        target_id=entry.target_id,
        details=json.loads(entry.details),
        created_at=entry.created_at,
        read_at=entry.read_at,
    )


@router.get("/{user_id}/net-position", response_model=PositionSummaryResponse)
def net_position(
    user_id: str,
    db: Session = Depends(get_db),
):
    """
    Summarize what a user owes or is owed across every group
    and friendship.
    """
    try:
        summary = BalanceAggregator(db).position_summary(user_id)
    except MalformedBalanceError as e:
        raise ledger_http_error(e)
    return PositionSummaryResponse.model_validate(summary)


@router.get("/{user_id}/groups", response_model=list[GroupStandingResponse])
def user_groups(
    user_id: str,
    status: Literal["owed", "owes", "settled"] | None = None,
    db: Session = Depends(get_db),
):
    """List the user's groups, optionally only those owed, owing or settled."""
    try:
        standings = BalanceAggregator(db).user_groups(user_id, status)
    except MalformedBalanceError as e:
        raise ledger_http_error(e)
    return [GroupStandingResponse.model_validate(s) for s in standings]


@router.get("/{user_id}/activity", response_model=list[ActivityResponse])
def activity_feed(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    entries = ActivityService(db).recent_for(user_id, limit=limit)
    return [activity_response(e) for e in entries]


@router.get("/{user_id}/activity/unread-count", response_model=UnreadCountResponse)
def unread_count(
    user_id: str,
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(
        user_id=user_id, unread=ActivityService(db).unread_count(user_id)
    )


@router.post("/{user_id}/activity/read-all", response_model=MarkedReadResponse)
def mark_all_read(
    user_id: str,
    db: Session = Depends(get_db),
):
    marked = ActivityService(db).mark_all_read(user_id)
    db.commit()
    return MarkedReadResponse(user_id=user_id, marked=marked)


@router.post(
    "/{user_id}/activity/{activity_id}/read",
    response_model=ActivityResponse,
)
def mark_read(
    user_id: str,
    activity_id: int,
    db: Session = Depends(get_db),
):
    service = ActivityService(db)
    try:
        entry = service.mark_read(user_id, activity_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise value_http_error(e)
    return activity_response(entry)
