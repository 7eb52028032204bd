# -*- coding: utf-8 -*-
"""Referrals — SQLite storage for settings and the commission ledger."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..app_db import db_conn, utc_now
from ..config import settings
from .money import from_cents
from .models import CommissionStatus


def _commission(row: Any) -> Dict[str, Any]:
    data = dict(row)
    data["amount"] = from_cents(data.pop("amount_cents"))
    data["is_recurring"] = bool(data["is_recurring"])
    return data


def _settings(row: Any) -> Dict[str, Any]:
    data = dict(row)
    data["is_recurring"] = bool(data["is_recurring"])
    return data


def get_settings() -> Dict[str, Any]:
    """Most recent settings row (seeded by `init_app_db`)."""
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM referral_settings ORDER BY id DESC LIMIT 1").fetchone()
    if not row:
        raise LookupError("referral settings not initialized")
    return _settings(row)


def update_settings(*, commission_percent: str, is_recurring: bool) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            UPDATE referral_settings SET commission_percent = ?, is_recurring = ?, updated_at = ?
            WHERE id = (SELECT id FROM referral_settings ORDER BY id DESC LIMIT 1)
            """,
            (commission_percent, 1 if is_recurring else 0, utc_now()),
        )
    return get_settings()


def insert_commission(
    *,
    referrer_id: str,
    referee_id: str,
    subscription_id: str,
    amount_cents: int,
    is_recurring: bool,
) -> Dict[str, Any]:
    """
    Append a pending commission.

    A replay of the same (subscription_id, referee_id) event returns the row
    already recorded instead of creating a second one.
    """
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO referral_commissions (
                referrer_id, referee_id, subscription_id, amount_cents, status, is_recurring, created_at
            ) VALUES (?, ?, ?, ?, 'pending', ?, ?)
            ON CONFLICT(subscription_id, referee_id) DO NOTHING
            """,
            (referrer_id, referee_id, subscription_id, amount_cents, 1 if is_recurring else 0, utc_now()),
        )
        row = conn.execute(
            "SELECT * FROM referral_commissions WHERE subscription_id = ? AND referee_id = ?",
            (subscription_id, referee_id),
        ).fetchone()
    return _commission(row)


def find_commission(subscription_id: str, referee_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM referral_commissions WHERE subscription_id = ? AND referee_id = ?",
            (subscription_id, referee_id),
        ).fetchone()
    return _commission(row) if row else None


def referee_has_commission(referee_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT 1 FROM referral_commissions WHERE referee_id = ? LIMIT 1", (referee_id,)
        ).fetchone()
    return row is not None


def get_commission(commission_id: int) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM referral_commissions WHERE id = ?", (commission_id,)).fetchone()
    return _commission(row) if row else None


def transition_status(
    commission_id: int,
    *,
    from_status: CommissionStatus,
    to_status: CommissionStatus,
) -> bool:
    """Conditional status update; False when the row is not in `from_status`."""
    paid_at = utc_now() if to_status == CommissionStatus.paid else None
    sql = "UPDATE referral_commissions SET status = ?, paid_at = ? WHERE id = ? AND status = ?"
    params = (to_status.value, paid_at, commission_id, from_status.value)
    with db_conn(settings.app_db_path) as conn:
        return conn.execute(sql, params).rowcount > 0


def list_for_referrer(referrer_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM referral_commissions WHERE referrer_id = ? ORDER BY created_at DESC, id DESC",
            (referrer_id,),
        ).fetchall()
    return [_commission(r) for r in rows]


def list_with_emails(
    *,
    limit: int = 100,
    offset: int = 0,
    status: Optional[CommissionStatus] = None,
) -> Dict[str, Any]:
    where = ""
    params: List[Any] = []
    if status is not None:
        where = "WHERE c.status = ?"
        params.append(status.value)
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT c.*, referrer.email AS referrer_email, referee.email AS referee_email
            FROM referral_commissions c
            LEFT JOIN users referrer ON referrer.id = c.referrer_id
            LEFT JOIN users referee ON referee.id = c.referee_id
            {where}
            ORDER BY c.created_at DESC, c.id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
        total = conn.execute(f"SELECT COUNT(*) FROM referral_commissions c {where}", params).fetchone()[0]
    return {"total": int(total), "commissions": [_commission(r) for r in rows]}


def summary_for_referrer(referrer_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        totals = {
            r["status"]: (int(r["cents"] or 0), int(r["n"]))
            for r in conn.execute(
                """
                SELECT status, SUM(amount_cents) AS cents, COUNT(*) AS n
                FROM referral_commissions WHERE referrer_id = ? GROUP BY status
                """,
                (referrer_id,),
            ).fetchall()
        }
        referral_count = conn.execute(
            "SELECT COUNT(*) FROM users WHERE referred_by = ?", (referrer_id,)
        ).fetchone()[0]
    return {
        "referral_count": int(referral_count),
        "pending_total": from_cents(totals.get("pending", (0, 0))[0]),
        "paid_total": from_cents(totals.get("paid", (0, 0))[0]),
        "commission_count": sum(n for _, n in totals.values()),
    }


def pending_for_payout(*, min_amount_cents: int, created_before: str) -> List[int]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT id FROM referral_commissions
            WHERE status = 'pending' AND amount_cents >= ? AND created_at <= ?
            ORDER BY created_at ASC, id ASC
            """,
            (min_amount_cents, created_before),
        ).fetchall()
    return [int(r["id"]) for r in rows]

