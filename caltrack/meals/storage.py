# -*- coding: utf-8 -*-
"""Meals — SQLite storage."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings
from .models import MealDailySummary, NutritionTotals

_MEAL_COLUMNS = ("eaten_at", "meal_type", "food_name", "calories", "protein_g", "carbs_g", "fat_g", "notes")


def date_prefix(iso8601: str) -> str:
    # Most ISO8601 strings start with YYYY-MM-DD; keep it robust without strict parsing.
    return (iso8601 or "")[:10]


def compute_totals(meals: Iterable[Dict[str, Any]]) -> NutritionTotals:
    calories = 0.0
    protein = 0.0
    carbs = 0.0
    fat = 0.0
    for meal in meals:
        calories += float(meal.get("calories") or 0.0)
        protein += float(meal.get("protein_g") or 0.0)
        carbs += float(meal.get("carbs_g") or 0.0)
        fat += float(meal.get("fat_g") or 0.0)
    return NutritionTotals(
        calories=round(calories, 1),
        protein_g=round(protein, 1),
        carbs_g=round(carbs, 1),
        fat_g=round(fat, 1),
    )


def create_meal(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    meal = {
        "id": str(uuid4()),
        "user_id": user_id,
        "eaten_at": data["eaten_at"],
        "meal_type": data["meal_type"],
        "food_name": data["food_name"],
        "calories": float(data.get("calories") or 0.0),
        "protein_g": float(data.get("protein_g") or 0.0),
        "carbs_g": float(data.get("carbs_g") or 0.0),
        "fat_g": float(data.get("fat_g") or 0.0),
        "notes": data.get("notes"),
        "source": data.get("source") or "manual",
        "created_at": utc_now(),
        "updated_at": None,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO meals (
                id, user_id, eaten_at, meal_type, food_name, calories, protein_g, carbs_g, fat_g,
                notes, source, created_at, updated_at
            ) VALUES (
                :id, :user_id, :eaten_at, :meal_type, :food_name, :calories, :protein_g, :carbs_g, :fat_g,
                :notes, :source, :created_at, :updated_at
            )
            """,
            meal,
        )
    return meal


def get_meal(user_id: str, meal_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id)).fetchone()
        return dict(row) if row else None


def update_meal(user_id: str, meal_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    fields = {k: v for k, v in changes.items() if k in _MEAL_COLUMNS and v is not None}
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id)).fetchone()
        if not row:
            return None
        meal = dict(row)
        if not fields:
            return meal
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{k} = :{k}" for k in fields)
        conn.execute(
            f"UPDATE meals SET {assignments} WHERE id = :meal_id AND user_id = :user_id",
            {**fields, "meal_id": meal_id, "user_id": user_id},
        )
    meal.update(fields)
    return meal


def delete_meal(user_id: str, meal_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM meals WHERE id = ? AND user_id = ?", (meal_id, user_id))
        return cur.rowcount > 0


def list_meals(
    user_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """Meals newest first; `start`/`end` are inclusive YYYY-MM-DD bounds on the eaten date."""
    sql = """
        SELECT * FROM meals
        WHERE user_id = ? AND substr(eaten_at, 1, 10) BETWEEN ? AND ?
        ORDER BY eaten_at DESC, created_at DESC
    """
    params: List[Any] = [user_id, start or "0000-01-01", end or "9999-12-31"]
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([limit, offset])
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [dict(r) for r in rows]


def count_meals(user_id: str, *, start: Optional[str] = None, end: Optional[str] = None) -> int:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT COUNT(*) FROM meals WHERE user_id = ? AND substr(eaten_at, 1, 10) BETWEEN ? AND ?",
            (user_id, start or "0000-01-01", end or "9999-12-31"),
        ).fetchone()
    return int(row[0])


def group_by_day(meals: Iterable[Dict[str, Any]]) -> Dict[str, Tuple[NutritionTotals, int]]:
    buckets: Dict[str, List[Dict[str, Any]]] = {}
    for meal in meals:
        buckets.setdefault(date_prefix(meal["eaten_at"]), []).append(meal)
    return {day: (compute_totals(items), len(items)) for day, items in sorted(buckets.items())}


def get_summary(user_id: str, *, start: str, end: str) -> Dict[str, Any]:
    meals = list_meals(user_id, start=start, end=end)
    days = [
        MealDailySummary(date=day, totals=totals, meal_count=count)
        for day, (totals, count) in group_by_day(meals).items()
    ]
    return {
        "start": start,
        "end": end,
        "totals": compute_totals(meals),
        "days": days,
    }
