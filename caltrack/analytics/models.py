# -*- coding: utf-8 -*-
"""Analytics — response models."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..meals.models import NutritionTotals


class Period(str, Enum):
    week = "week"
    month = "month"
    year = "year"


PERIOD_DAYS = {Period.week: 7, Period.month: 30, Period.year: 365}


class DailyPoint(BaseModel):
    date: str
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    meal_count: int = 0


class DailySeriesResponse(BaseModel):
    period: Period
    start: str
    end: str
    days: List[DailyPoint]


class TodayResponse(BaseModel):
    date: str
    totals: NutritionTotals
    meal_count: int = 0
    calorie_goal: float
    remaining_calories: float


class DayMacros(BaseModel):
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


class WeeklyStatsResponse(BaseModel):
    week_starting: str
    average_calories: int = 0
    average_protein: int = 0
    meals_tracked: int = 0
    healthiest_day: Optional[str] = None
    calories_by_day: Dict[str, float] = Field(default_factory=dict)
    macros_by_day: Dict[str, DayMacros] = Field(default_factory=dict)
    workouts_logged: int = 0
    calories_burned: float = 0.0
    weekly_workout_goal: int = 0
    workout_goal_met: bool = False


class BestMacroDay(BaseModel):
    date: str
    score: float


class MacroRatio(BaseModel):
    protein: int = 0
    carbs: int = 0
    fat: int = 0


class AchievementsResponse(BaseModel):
    start: str
    end: str
    streak_low_kcal: float
    streak_high_kcal: float
    current_streak: int = 0
    longest_streak: int = 0
    best_macro_day: Optional[BestMacroDay] = None
    macro_ratio: MacroRatio
    macro_consistency_score: float = 0.0
