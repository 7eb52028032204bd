# -*- coding: utf-8 -*-
"""Planned meals — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..meals.models import MealType, require_date_prefix


def _plain_date(value: str) -> str:
    v = require_date_prefix(value)
    if len(v) != 10:
        raise ValueError("planned_date must be YYYY-MM-DD")
    return v


class PlannedMealCreateRequest(BaseModel):
    planned_date: str = Field(..., description="YYYY-MM-DD")
    meal_type: MealType
    meal_name: str = Field(..., min_length=1, max_length=200)
    calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)
    recipe: Optional[str] = Field(None, max_length=10000)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("planned_date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        return _plain_date(value)


class PlannedMealUpdateRequest(BaseModel):
    planned_date: Optional[str] = None
    meal_type: Optional[MealType] = None
    meal_name: Optional[str] = Field(None, min_length=1, max_length=200)
    calories: Optional[float] = Field(None, ge=0)
    protein_g: Optional[float] = Field(None, ge=0)
    carbs_g: Optional[float] = Field(None, ge=0)
    fat_g: Optional[float] = Field(None, ge=0)
    recipe: Optional[str] = Field(None, max_length=10000)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("planned_date")
    @classmethod
    def _check_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _plain_date(value)


class PlannedMeal(BaseModel):
    id: str
    user_id: str
    planned_date: str
    meal_type: MealType
    meal_name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    recipe: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class PlannedMealListResponse(BaseModel):
    count: int
    planned_meals: List[PlannedMeal]
