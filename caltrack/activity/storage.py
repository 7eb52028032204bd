# -*- coding: utf-8 -*-
"""Activity log — append-only audit trail of user and admin actions."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from ..app_db import db_conn, utc_now
from ..config import settings

logger = logging.getLogger(__name__)


def record_activity(user_id: Optional[str], action: str, details: Optional[Dict[str, Any]] = None) -> int:
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            "INSERT INTO activity_log (user_id, action, details_json, created_at) VALUES (?, ?, ?, ?)",
            (user_id, action, json.dumps(details or {}, ensure_ascii=False, default=str), now),
        )
        entry_id = int(cur.lastrowid)
    logger.debug("activity %s user=%s id=%s", action, user_id, entry_id)
    return entry_id


def _row_to_entry(row: Dict[str, Any]) -> Dict[str, Any]:
    try:
        details = json.loads(row.get("details_json") or "{}")
    except json.JSONDecodeError:
        details = {}
    return {
        "id": row["id"],
        "user_id": row.get("user_id"),
        "email": row.get("email"),
        "action": row["action"],
        "details": details,
        "created_at": row["created_at"],
    }


def list_activity(
    *,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if user_id:
        clauses.append("a.user_id = ?")
        params.append(user_id)
    if action:
        clauses.append("a.action = ?")
        params.append(action)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT a.*, u.email AS email
            FROM activity_log a
            LEFT JOIN users u ON u.id = a.user_id
            {where}
            ORDER BY a.created_at DESC, a.id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
    return [_row_to_entry(dict(r)) for r in rows]


def activity_summary() -> Dict[str, int]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT action, COUNT(*) AS n FROM activity_log GROUP BY action ORDER BY action"
        ).fetchall()
    return {r["action"]: int(r["n"]) for r in rows}
