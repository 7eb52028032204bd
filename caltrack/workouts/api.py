# -*- coding: utf-8 -*-
"""Workouts — API endpoints."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query

from ..activity import record_activity
from ..auth.security import get_current_user
from .models import Workout, WorkoutCreateRequest, WorkoutListResponse
from .storage import create_workout, delete_workout, list_workouts

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])

logger = logging.getLogger(__name__)


@router.get("", response_model=WorkoutListResponse, summary="List my workouts")
def list_(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    workouts = list_workouts(user["id"], start=start, end=end)
    return WorkoutListResponse(count=len(workouts), workouts=[Workout.model_validate(w) for w in workouts])


@router.post("", response_model=Workout, status_code=201, summary="Log a workout")
def create(request: WorkoutCreateRequest, user: dict = Depends(get_current_user)):
    try:
        workout = create_workout(user["id"], request.model_dump())
    except sqlite3.Error as exc:
        logger.exception("failed to save workout for user %s", user["id"])
        raise HTTPException(status_code=500, detail=f"Failed to save workout: {exc}") from exc
    record_activity(
        user["id"], "workout_logged", {"workout_id": workout["id"], "calories_burned": workout["calories_burned"]}
    )
    return Workout.model_validate(workout)


@router.delete("/{workout_id}", summary="Delete a workout")
def delete(workout_id: str, user: dict = Depends(get_current_user)):
    if not delete_workout(user["id"], workout_id):
        raise HTTPException(status_code=404, detail="Workout not found")
    record_activity(user["id"], "workout_deleted", {"workout_id": workout_id})
    return {"status": "ok", "workout_id": workout_id}
