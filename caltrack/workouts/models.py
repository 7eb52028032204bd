# -*- coding: utf-8 -*-
"""Workouts — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..meals.models import require_date_prefix


class WorkoutCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    duration_min: int = Field(..., gt=0, le=1440)
    calories_burned: float = Field(..., ge=0)
    performed_at: Optional[str] = Field(None, description="ISO8601 timestamp; defaults to now")
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("performed_at")
    @classmethod
    def _check_date_prefix(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return require_date_prefix(value)


class Workout(BaseModel):
    id: str
    user_id: str
    name: str
    duration_min: int
    calories_burned: float
    performed_at: str
    notes: Optional[str] = None
    created_at: str


class WorkoutListResponse(BaseModel):
    count: int
    workouts: List[Workout]
