# -*- coding: utf-8 -*-
"""Nutrition goals — models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_GOALS = {
    "daily_calories": 2000.0,
    "daily_protein_g": 150.0,
    "daily_carbs_g": 200.0,
    "daily_fat_g": 65.0,
    "weekly_workouts": 3,
    "water_intake_ml": 2000,
}


class NutritionGoals(BaseModel):
    daily_calories: float = Field(..., gt=0, le=20000)
    daily_protein_g: float = Field(..., gt=0, le=2000)
    daily_carbs_g: float = Field(..., gt=0, le=3000)
    daily_fat_g: float = Field(..., gt=0, le=1000)
    weekly_workouts: int = Field(3, ge=0, le=50)
    water_intake_ml: int = Field(2000, gt=0, le=20000)


class NutritionGoalsResponse(NutritionGoals):
    user_id: str
    is_default: bool = False
    updated_at: Optional[str] = None
