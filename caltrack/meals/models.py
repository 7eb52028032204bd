# -*- coding: utf-8 -*-
"""Meals — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def require_date_prefix(value: str) -> str:
    # Day grouping relies on a leading YYYY-MM-DD.
    v = value.strip()
    if len(v) < 10 or v[4] != "-" or v[7] != "-" or not (v[:4] + v[5:7] + v[8:10]).isdigit():
        raise ValueError("must start with YYYY-MM-DD")
    return v


class NutritionTotals(BaseModel):
    calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class MealCreateRequest(BaseModel):
    eaten_at: str = Field(..., description="ISO8601 timestamp")
    meal_type: MealType
    food_name: str = Field(..., min_length=1, max_length=200)
    calories: float = Field(..., ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
    source: str = Field("manual", max_length=64)

    @field_validator("eaten_at")
    @classmethod
    def _check_date_prefix(cls, value: str) -> str:
        return require_date_prefix(value)


class MealUpdateRequest(BaseModel):
    eaten_at: Optional[str] = None
    meal_type: Optional[MealType] = None
    food_name: Optional[str] = Field(None, min_length=1, max_length=200)
    calories: Optional[float] = Field(None, ge=0)
    protein_g: Optional[float] = Field(None, ge=0)
    carbs_g: Optional[float] = Field(None, ge=0)
    fat_g: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("eaten_at")
    @classmethod
    def _check_date_prefix(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return require_date_prefix(value)


class Meal(BaseModel):
    id: str
    user_id: str
    eaten_at: str
    meal_type: MealType
    food_name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    notes: Optional[str] = None
    source: str = "manual"
    created_at: str
    updated_at: Optional[str] = None


class MealListResponse(BaseModel):
    count: int
    meals: List[Meal]


class MealDailySummary(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    totals: NutritionTotals
    meal_count: int = Field(0, ge=0)


class MealSummaryResponse(BaseModel):
    start: str
    end: str
    totals: NutritionTotals
    days: List[MealDailySummary]
