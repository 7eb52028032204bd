# -*- coding: utf-8 -*-
"""Nutrition goals — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..activity import record_activity
from ..auth.security import get_current_user
from .models import NutritionGoals, NutritionGoalsResponse
from .storage import get_goals_or_default, upsert_goals

router = APIRouter(prefix="/api/nutrition-goals", tags=["Nutrition Goals"])


@router.get("", response_model=NutritionGoalsResponse, summary="Get nutrition goals (defaults when unset)")
def get_goals(user: dict = Depends(get_current_user)):
    return NutritionGoalsResponse.model_validate(get_goals_or_default(user["id"]))


@router.put("", response_model=NutritionGoalsResponse, summary="Create or update nutrition goals")
def put_goals(request: NutritionGoals, user: dict = Depends(get_current_user)):
    row = upsert_goals(user["id"], request.model_dump())
    record_activity(user["id"], "goals_updated", {"daily_calories": request.daily_calories})
    return NutritionGoalsResponse.model_validate(row)
