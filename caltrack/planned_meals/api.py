# -*- coding: utf-8 -*-
"""Planned meals — API endpoints."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..activity import record_activity
from ..auth.security import get_current_user
from .models import PlannedMeal, PlannedMealCreateRequest, PlannedMealListResponse, PlannedMealUpdateRequest
from .storage import create_planned_meal, delete_planned_meal, list_planned_meals, update_planned_meal

router = APIRouter(prefix="/api/planned-meals", tags=["Planned Meals"])

logger = logging.getLogger(__name__)


@router.post("", response_model=PlannedMeal, status_code=201, summary="Plan a meal")
def create(request: PlannedMealCreateRequest, user: dict = Depends(get_current_user)):
    data = request.model_dump()
    data["meal_type"] = request.meal_type.value
    try:
        planned = create_planned_meal(user["id"], data)
    except sqlite3.Error as exc:
        logger.exception("failed to save planned meal for user %s", user["id"])
        raise HTTPException(status_code=500, detail=f"Failed to save planned meal: {exc}") from exc
    record_activity(user["id"], "meal_planned", {"planned_meal_id": planned["id"], "date": planned["planned_date"]})
    return PlannedMeal.model_validate(planned)


@router.get("", response_model=PlannedMealListResponse, summary="Planned meals in a date range")
def list_(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    planned = list_planned_meals(user["id"], start=start, end=end)
    return PlannedMealListResponse(count=len(planned), planned_meals=[PlannedMeal.model_validate(p) for p in planned])


@router.put("/{planned_id}", response_model=PlannedMeal, summary="Update a planned meal")
def update(planned_id: str, request: PlannedMealUpdateRequest, user: dict = Depends(get_current_user)):
    changes = request.model_dump(exclude_unset=True)
    if request.meal_type is not None:
        changes["meal_type"] = request.meal_type.value
    planned = update_planned_meal(user["id"], planned_id, changes)
    if not planned:
        raise HTTPException(status_code=404, detail="Planned meal not found")
    return PlannedMeal.model_validate(planned)


@router.delete("/{planned_id}", status_code=204, summary="Delete a planned meal")
def delete(planned_id: str, user: dict = Depends(get_current_user)):
    if not delete_planned_meal(user["id"], planned_id):
        raise HTTPException(status_code=404, detail="Planned meal not found")
    record_activity(user["id"], "planned_meal_deleted", {"planned_meal_id": planned_id})
    return Response(status_code=204)
