# -*- coding: utf-8 -*-
"""Workouts — SQLite storage."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings


def create_workout(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    now = utc_now()
    workout = {
        "id": str(uuid4()),
        "user_id": user_id,
        "name": data["name"],
        "duration_min": int(data["duration_min"]),
        "calories_burned": float(data.get("calories_burned") or 0.0),
        "performed_at": data.get("performed_at") or now,
        "notes": data.get("notes"),
        "created_at": now,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO workouts (id, user_id, name, duration_min, calories_burned, performed_at, notes, created_at)
            VALUES (:id, :user_id, :name, :duration_min, :calories_burned, :performed_at, :notes, :created_at)
            """,
            workout,
        )
    return workout


def list_workouts(user_id: str, *, start: Optional[str] = None, end: Optional[str] = None) -> List[Dict[str, Any]]:
    """Workouts newest first; `start`/`end` are inclusive YYYY-MM-DD bounds."""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM workouts
            WHERE user_id = ? AND substr(performed_at, 1, 10) BETWEEN ? AND ?
            ORDER BY performed_at DESC, created_at DESC
            """,
            (user_id, start or "0000-01-01", end or "9999-12-31"),
        ).fetchall()
    return [dict(r) for r in rows]


def delete_workout(user_id: str, workout_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM workouts WHERE id = ? AND user_id = ?", (workout_id, user_id))
        return cur.rowcount > 0


def workout_totals(user_id: str, *, start: str, end: str) -> Tuple[int, float]:
    """(workout count, calories burned) between two inclusive dates."""
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            """
            SELECT COUNT(*), COALESCE(SUM(calories_burned), 0) FROM workouts
            WHERE user_id = ? AND substr(performed_at, 1, 10) BETWEEN ? AND ?
            """,
            (user_id, start, end),
        ).fetchone()
    return int(row[0]), float(row[1])
