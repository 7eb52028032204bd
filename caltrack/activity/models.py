# -*- coding: utf-8 -*-
"""Activity log — models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ActivityEntry(BaseModel):
    id: int
    user_id: Optional[str] = None
    email: Optional[str] = None
    action: str
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: str


class ActivityListResponse(BaseModel):
    count: int
    entries: List[ActivityEntry]


class ActivitySummaryResponse(BaseModel):
    total: int
    by_action: Dict[str, int]
