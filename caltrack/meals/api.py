# -*- coding: utf-8 -*-
"""Meals — API endpoints."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query

from ..activity import record_activity
from ..auth.security import get_current_user
from .models import Meal, MealCreateRequest, MealListResponse, MealSummaryResponse, MealUpdateRequest
from .storage import count_meals, create_meal, delete_meal, get_meal, get_summary, list_meals, update_meal

router = APIRouter(prefix="/api/meals", tags=["Meals"])

logger = logging.getLogger(__name__)


@router.post("", response_model=Meal, status_code=201, summary="Log a meal")
def create(request: MealCreateRequest, user: dict = Depends(get_current_user)):
    data = request.model_dump()
    data["meal_type"] = request.meal_type.value
    try:
        meal = create_meal(user["id"], data)
    except sqlite3.Error as exc:
        logger.exception("failed to save meal for user %s", user["id"])
        raise HTTPException(status_code=500, detail=f"Failed to save meal: {exc}") from exc
    record_activity(user["id"], "meal_logged", {"meal_id": meal["id"], "calories": meal["calories"]})
    return Meal.model_validate(meal)


@router.get("", response_model=MealListResponse, summary="List meals")
def list_(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: dict = Depends(get_current_user),
):
    meals = list_meals(user["id"], start=start, end=end, limit=limit, offset=offset)
    total = count_meals(user["id"], start=start, end=end)
    return MealListResponse(count=total, meals=[Meal.model_validate(m) for m in meals])


@router.get("/summary", response_model=MealSummaryResponse, summary="Daily nutrition summary")
def summary(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    return MealSummaryResponse.model_validate(get_summary(user["id"], start=start, end=end))


@router.get("/{meal_id}", response_model=Meal, summary="Get a meal")
def get(meal_id: str, user: dict = Depends(get_current_user)):
    meal = get_meal(user["id"], meal_id)
    if not meal:
        raise HTTPException(status_code=404, detail="Meal not found")
    return Meal.model_validate(meal)


@router.put("/{meal_id}", response_model=Meal, summary="Update a meal")
def update(meal_id: str, request: MealUpdateRequest, user: dict = Depends(get_current_user)):
    changes = request.model_dump(exclude_unset=True)
    if request.meal_type is not None:
        changes["meal_type"] = request.meal_type.value
    meal = update_meal(user["id"], meal_id, changes)
    if not meal:
        raise HTTPException(status_code=404, detail="Meal not found")
    record_activity(user["id"], "meal_updated", {"meal_id": meal_id, "fields": sorted(changes)})
    return Meal.model_validate(meal)


@router.delete("/{meal_id}", summary="Delete a meal")
def delete(meal_id: str, user: dict = Depends(get_current_user)):
    if not delete_meal(user["id"], meal_id):
        raise HTTPException(status_code=404, detail="Meal not found")
    record_activity(user["id"], "meal_deleted", {"meal_id": meal_id})
    return {"status": "ok", "meal_id": meal_id}
