# -*- coding: utf-8 -*-
"""Subscriptions — SQLite storage."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings
from ..referrals.money import from_cents, to_cents


def _row_to_subscription(row: Any) -> Dict[str, Any]:
    data = dict(row)
    data["amount"] = from_cents(data.pop("amount_cents"))
    return data


def create_subscription(user_id: str, *, plan: str, amount: Decimal) -> Dict[str, Any]:
    row = {
        "id": str(uuid4()),
        "user_id": user_id,
        "plan": plan,
        "amount_cents": to_cents(amount),
        "status": "active",
        "created_at": utc_now(),
        "renewed_at": None,
        "cancelled_at": None,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO subscriptions (id, user_id, plan, amount_cents, status, created_at, renewed_at, cancelled_at)
            VALUES (:id, :user_id, :plan, :amount_cents, :status, :created_at, :renewed_at, :cancelled_at)
            """,
            row,
        )
    return _row_to_subscription(row)


def get_subscription(subscription_id: str, *, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    sql = "SELECT * FROM subscriptions WHERE id = ?"
    params: List[Any] = [subscription_id]
    if user_id is not None:
        sql += " AND user_id = ?"
        params.append(user_id)
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(sql, params).fetchone()
    return _row_to_subscription(row) if row else None


def mark_renewed(subscription_id: str) -> Dict[str, Any]:
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        conn.execute("UPDATE subscriptions SET renewed_at = ? WHERE id = ?", (now, subscription_id))
        row = conn.execute("SELECT * FROM subscriptions WHERE id = ?", (subscription_id,)).fetchone()
    return _row_to_subscription(row)


def list_subscriptions(user_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM subscriptions WHERE user_id = ? ORDER BY created_at DESC", (user_id,)
        ).fetchall()
    return [_row_to_subscription(r) for r in rows]


def cancel_subscription(subscription_id: str) -> Optional[Dict[str, Any]]:
    """Move an active subscription to `cancelled`; None when it was not active."""
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            "UPDATE subscriptions SET status = 'cancelled', cancelled_at = ? WHERE id = ? AND status = 'active'",
            (utc_now(), subscription_id),
        )
        if cur.rowcount == 0:
            return None
        row = conn.execute("SELECT * FROM subscriptions WHERE id = ?", (subscription_id,)).fetchone()
    return _row_to_subscription(row)
