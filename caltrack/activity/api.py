# -*- coding: utf-8 -*-
"""Activity log — admin endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import require_admin
from .models import ActivityEntry, ActivityListResponse, ActivitySummaryResponse
from .storage import activity_summary, list_activity

router = APIRouter(prefix="/api/admin/activity", tags=["Admin Activity"], dependencies=[Depends(require_admin)])


@router.get("", response_model=ActivityListResponse, summary="List activity log entries")
def list_entries(
    user_id: str | None = Query(default=None),
    action: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
):
    rows = list_activity(user_id=user_id, action=action, limit=limit, offset=offset)
    entries = [ActivityEntry.model_validate(r) for r in rows]
    return ActivityListResponse(count=len(entries), entries=entries)


@router.get("/summary", response_model=ActivitySummaryResponse, summary="Activity counts per action")
def summary():
    by_action = activity_summary()
    return ActivitySummaryResponse(total=sum(by_action.values()), by_action=by_action)
