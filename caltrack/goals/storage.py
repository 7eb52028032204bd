# -*- coding: utf-8 -*-
"""Nutrition goals — SQLite storage."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..app_db import db_conn, utc_now
from ..config import settings
from .models import DEFAULT_GOALS


def get_goals(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM nutrition_goals WHERE user_id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def get_goals_or_default(user_id: str) -> Dict[str, Any]:
    stored = get_goals(user_id)
    if stored:
        return {**stored, "is_default": False}
    return {"user_id": user_id, **DEFAULT_GOALS, "is_default": True, "updated_at": None}


def upsert_goals(user_id: str, goals: Dict[str, Any]) -> Dict[str, Any]:
    row = {"user_id": user_id, **goals, "updated_at": utc_now()}
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO nutrition_goals (
                user_id, daily_calories, daily_protein_g, daily_carbs_g, daily_fat_g,
                weekly_workouts, water_intake_ml, updated_at
            ) VALUES (
                :user_id, :daily_calories, :daily_protein_g, :daily_carbs_g, :daily_fat_g,
                :weekly_workouts, :water_intake_ml, :updated_at
            )
            ON CONFLICT(user_id) DO UPDATE SET
                daily_calories = excluded.daily_calories,
                daily_protein_g = excluded.daily_protein_g,
                daily_carbs_g = excluded.daily_carbs_g,
                daily_fat_g = excluded.daily_fat_g,
                weekly_workouts = excluded.weekly_workouts,
                water_intake_ml = excluded.water_intake_ml,
                updated_at = excluded.updated_at
            """,
            row,
        )
    return {**row, "is_default": False}
