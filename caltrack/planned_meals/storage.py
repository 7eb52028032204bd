# -*- coding: utf-8 -*-
"""Planned meals — SQLite storage."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings

_COLUMNS = (
    "planned_date",
    "meal_type",
    "meal_name",
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "recipe",
    "notes",
)


def create_planned_meal(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    planned = {
        "id": str(uuid4()),
        "user_id": user_id,
        **{k: data.get(k) for k in _COLUMNS},
        "created_at": utc_now(),
        "updated_at": None,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO planned_meals (
                id, user_id, planned_date, meal_type, meal_name, calories, protein_g, carbs_g, fat_g,
                recipe, notes, created_at, updated_at
            ) VALUES (
                :id, :user_id, :planned_date, :meal_type, :meal_name, :calories, :protein_g, :carbs_g, :fat_g,
                :recipe, :notes, :created_at, :updated_at
            )
            """,
            planned,
        )
    return planned


def list_planned_meals(user_id: str, *, start: str, end: str) -> List[Dict[str, Any]]:
    """Planned meals between two inclusive dates, latest date first."""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM planned_meals
            WHERE user_id = ? AND planned_date BETWEEN ? AND ?
            ORDER BY planned_date DESC, meal_type
            """,
            (user_id, start, end),
        ).fetchall()
    return [dict(r) for r in rows]


def update_planned_meal(user_id: str, planned_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    fields = {k: v for k, v in changes.items() if k in _COLUMNS and v is not None}
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM planned_meals WHERE id = ? AND user_id = ?", (planned_id, user_id)
        ).fetchone()
        if not row:
            return None
        planned = dict(row)
        if not fields:
            return planned
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{k} = :{k}" for k in fields)
        conn.execute(
            f"UPDATE planned_meals SET {assignments} WHERE id = :planned_id AND user_id = :user_id",
            {**fields, "planned_id": planned_id, "user_id": user_id},
        )
    planned.update(fields)
    return planned


def delete_planned_meal(user_id: str, planned_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM planned_meals WHERE id = ? AND user_id = ?", (planned_id, user_id))
        return cur.rowcount > 0
