# -*- coding: utf-8 -*-
"""Security center — events and IP blocks (SQLite)."""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, iso_utc, utc_now
from ..config import settings

logger = logging.getLogger(__name__)

TIME_RANGES: Dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}

SEVERITIES = ("critical", "high", "medium", "low")
EVENT_TYPES = ("failed_login", "suspicious_activity", "api_abuse", "password_change", "admin_action")


def cutoff_for(time_range: str, *, default: str = "24h") -> str:
    delta = TIME_RANGES.get(time_range) or TIME_RANGES[default]
    cutoff = datetime.now(timezone.utc) - delta
    return iso_utc(cutoff)


def record_event(
    *,
    event_type: str,
    severity: str,
    user_id: Optional[str] = None,
    email: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    details: Optional[str] = None,
) -> Dict[str, Any]:
    event = {
        "id": str(uuid4()),
        "type": event_type,
        "severity": severity,
        "user_id": user_id,
        "email": email,
        "ip_address": ip_address,
        "user_agent": user_agent,
        "details": details,
        "status": "pending",
        "created_at": utc_now(),
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO security_events (id, type, severity, user_id, email, ip_address, user_agent, details, status, created_at)
            VALUES (:id, :type, :severity, :user_id, :email, :ip_address, :user_agent, :details, :status, :created_at)
            """,
            event,
        )
    logger.info("security event %s (%s) from %s", event_type, severity, ip_address)
    return event


def list_events(*, severity: Optional[str] = None, since: Optional[str] = None) -> List[Dict[str, Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if severity and severity != "all":
        clauses.append("severity = ?")
        params.append(severity)
    if since:
        clauses.append("created_at >= ?")
        params.append(since)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"SELECT * FROM security_events {where} ORDER BY created_at DESC", tuple(params)
        ).fetchall()
    return [dict(r) for r in rows]


def resolve_event(event_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("UPDATE security_events SET status = 'resolved' WHERE id = ?", (event_id,))
        return cur.rowcount > 0


def _row_to_block(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["is_active"] = bool(out.get("is_active"))
    return out


def list_blocked_ips(*, since: Optional[str] = None) -> List[Dict[str, Any]]:
    query = "SELECT * FROM blocked_ips"
    params: tuple = ()
    if since:
        query += " WHERE blocked_at >= ?"
        params = (since,)
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(query + " ORDER BY blocked_at DESC", params).fetchall()
    return [_row_to_block(dict(r)) for r in rows]


def is_ip_blocked(ip_address: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT 1 FROM blocked_ips WHERE ip_address = ? AND is_active = 1 LIMIT 1", (ip_address,)
        ).fetchone()
    return row is not None


def block_ip(*, ip_address: str, reason: str, blocked_by: str) -> Optional[Dict[str, Any]]:
    """Block an address. Returns None when it is already actively blocked."""
    if is_ip_blocked(ip_address):
        return None
    block = {
        "id": str(uuid4()),
        "ip_address": ip_address,
        "reason": reason,
        "blocked_at": utc_now(),
        "blocked_by": blocked_by,
        "is_active": 1,
        "unblocked_at": None,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO blocked_ips (id, ip_address, reason, blocked_at, blocked_by, is_active, unblocked_at)
            VALUES (:id, :ip_address, :reason, :blocked_at, :blocked_by, :is_active, :unblocked_at)
            """,
            block,
        )
    logger.warning("blocked IP %s: %s", ip_address, reason)
    return _row_to_block(block)


def unblock_ip(block_id: str) -> Optional[Dict[str, Any]]:
    # Rows are deactivated, never removed, so the audit trail survives.
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM blocked_ips WHERE id = ?", (block_id,)).fetchone()
        if not row:
            return None
        now = utc_now()
        conn.execute(
            "UPDATE blocked_ips SET is_active = 0, unblocked_at = COALESCE(unblocked_at, ?) WHERE id = ?",
            (now, block_id),
        )
        updated = dict(row)
    updated["is_active"] = 0
    updated["unblocked_at"] = updated.get("unblocked_at") or now
    logger.info("unblocked IP %s", updated["ip_address"])
    return _row_to_block(updated)


def compute_metrics() -> Dict[str, int]:
    events = list_events()
    active_blocks = [b for b in list_blocked_ips() if b["is_active"]]
    return {
        "total_events": len(events),
        "critical_events": sum(1 for e in events if e["severity"] == "critical"),
        "blocked_ips": len(active_blocks),
        "failed_logins": sum(1 for e in events if e["type"] == "failed_login"),
        "suspicious_activities": sum(1 for e in events if e["type"] == "suspicious_activity"),
        "active_threats": sum(1 for e in events if e["status"] in ("pending", "investigating")),
    }


def build_report(time_range: str) -> Dict[str, Any]:
    since = cutoff_for(time_range, default="30d")
    events = list_events(since=since)
    blocks = list_blocked_ips(since=since)
    return {
        "report_generated": utc_now(),
        "time_range": time_range if time_range in TIME_RANGES else "30d",
        "summary": {
            "total_events": len(events),
            "events_by_severity": {s: sum(1 for e in events if e["severity"] == s) for s in SEVERITIES},
            "events_by_type": {t: sum(1 for e in events if e["type"] == t) for t in EVENT_TYPES},
            "total_ip_blocks": len(blocks),
            "active_blocks": sum(1 for b in blocks if b["is_active"]),
        },
        "events": events,
        "blocked_ips": blocks,
    }


def report_to_csv(report: Dict[str, Any]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Timestamp", "Type", "Severity", "User Email", "IP Address", "Details", "Status"])
    for event in report["events"]:
        writer.writerow(
            [
                event["created_at"],
                event["type"],
                event["severity"],
                event.get("email") or "",
                event.get("ip_address") or "",
                event.get("details") or "",
                event["status"],
            ]
        )
    return buf.getvalue()
