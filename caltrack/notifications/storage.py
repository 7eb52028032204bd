# -*- coding: utf-8 -*-
"""Notifications — SQLite storage for notifications and templates."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
SENDABLE_STATUSES = ("draft", "scheduled")


def extract_variables(*texts: str) -> List[str]:
    """`{{name}}` placeholders in order of first appearance, without duplicates."""
    seen: List[str] = []
    for text in texts:
        for name in _PLACEHOLDER_RE.findall(text or ""):
            if name not in seen:
                seen.append(name)
    return seen


def _notification(row: Any) -> Dict[str, Any]:
    data = dict(row)
    data["channels"] = json.loads(data.pop("channels_json") or "[]")
    return data


def _template(row: Any) -> Dict[str, Any]:
    data = dict(row)
    data["variables"] = json.loads(data.pop("variables_json") or "[]")
    data["is_active"] = bool(data["is_active"])
    return data


def count_recipients(recipient_type: str, custom_list: Sequence[str] = ()) -> int:
    # Premium means an active subscription; everyone else is free.
    if recipient_type == "custom":
        return len({c.strip().lower() for c in custom_list if c.strip()})
    with db_conn(settings.app_db_path) as conn:
        total = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        premium = conn.execute(
            "SELECT COUNT(DISTINCT user_id) FROM subscriptions WHERE status = 'active'"
        ).fetchone()[0]
    if recipient_type == "premium":
        return int(premium)
    if recipient_type == "free":
        return int(total) - int(premium)
    return int(total)


def create_notification(data: Dict[str, Any], *, created_by: str) -> Dict[str, Any]:
    recipients = data.get("recipients") or {}
    recipient_type = recipients.get("type") or "all"
    row = {
        "id": str(uuid4()),
        "title": data["title"],
        "message": data["message"],
        "type": data.get("type") or "info",
        "priority": data.get("priority") or "medium",
        "status": "scheduled" if data.get("scheduled_at") else "draft",
        "channels_json": json.dumps(list(data.get("channels") or ["email"])),
        "recipient_type": recipient_type,
        "recipient_count": count_recipients(recipient_type, recipients.get("custom_list") or []),
        "scheduled_at": data.get("scheduled_at"),
        "sent_at": None,
        "created_at": utc_now(),
        "created_by": created_by,
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO notifications (
                id, title, message, type, priority, status, channels_json, recipient_type,
                recipient_count, scheduled_at, sent_at, created_at, created_by
            ) VALUES (
                :id, :title, :message, :type, :priority, :status, :channels_json, :recipient_type,
                :recipient_count, :scheduled_at, :sent_at, :created_at, :created_by
            )
            """,
            row,
        )
    return _notification(row)


def get_notification(notification_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM notifications WHERE id = ?", (notification_id,)).fetchone()
    return _notification(row) if row else None


def list_notifications(*, type_: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    clauses: List[str] = []
    params: List[Any] = []
    if type_ and type_ != "all":
        clauses.append("type = ?")
        params.append(type_)
    if status and status != "all":
        clauses.append("status = ?")
        params.append(status)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(f"SELECT * FROM notifications {where} ORDER BY created_at DESC", params).fetchall()
    return [_notification(r) for r in rows]


def update_notification(notification_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    fields = {k: v for k, v in changes.items() if v is not None}
    if "channels" in fields:
        fields["channels_json"] = json.dumps(list(fields.pop("channels")))
    allowed = {"title", "message", "type", "priority", "channels_json", "scheduled_at"}
    fields = {k: v for k, v in fields.items() if k in allowed}
    with db_conn(settings.app_db_path) as conn:
        if fields:
            assignments = ", ".join(f"{k} = :{k}" for k in fields)
            conn.execute(
                f"UPDATE notifications SET {assignments} WHERE id = :notification_id",
                {**fields, "notification_id": notification_id},
            )
        row = conn.execute("SELECT * FROM notifications WHERE id = ?", (notification_id,)).fetchone()
    return _notification(row) if row else None


def delete_notification(notification_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        return conn.execute("DELETE FROM notifications WHERE id = ?", (notification_id,)).rowcount > 0


def mark_sent(notification_id: str) -> bool:
    """Flip a draft/scheduled notification to sent; False when it is in any other state."""
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            f"UPDATE notifications SET status = 'sent', sent_at = ? "
            f"WHERE id = ? AND status IN ({', '.join('?' for _ in SENDABLE_STATUSES)})",
            (utc_now(), notification_id, *SENDABLE_STATUSES),
        )
        return cur.rowcount > 0


def notification_stats() -> Dict[str, int]:
    with db_conn(settings.app_db_path) as conn:
        by_status = {
            r["status"]: (int(r["n"]), int(r["reached"] or 0))
            for r in conn.execute(
                "SELECT status, COUNT(*) AS n, SUM(recipient_count) AS reached FROM notifications GROUP BY status"
            ).fetchall()
        }
        subscribers = conn.execute(
            "SELECT COUNT(DISTINCT user_id) FROM subscriptions WHERE status = 'active'"
        ).fetchone()[0]
    return {
        "total_sent": by_status.get("sent", (0, 0))[0],
        "total_scheduled": by_status.get("scheduled", (0, 0))[0],
        "total_drafts": by_status.get("draft", (0, 0))[0],
        "total_recipients_reached": by_status.get("sent", (0, 0))[1],
        "active_subscribers": int(subscribers),
    }


def create_template(data: Dict[str, Any]) -> Dict[str, Any]:
    row = {
        "id": str(uuid4()),
        "name": data["name"],
        "subject": data["subject"],
        "content": data["content"],
        "type": data.get("type") or "email",
        "variables_json": json.dumps(extract_variables(data["subject"], data["content"])),
        "is_active": 1 if data.get("is_active", True) else 0,
        "created_at": utc_now(),
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO notification_templates (id, name, subject, content, type, variables_json, is_active, created_at)
            VALUES (:id, :name, :subject, :content, :type, :variables_json, :is_active, :created_at)
            """,
            row,
        )
    return _template(row)


def list_templates() -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute("SELECT * FROM notification_templates ORDER BY created_at DESC").fetchall()
    return [_template(r) for r in rows]


def update_template(template_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM notification_templates WHERE id = ?", (template_id,)).fetchone()
        if not row:
            return None
        current = _template(row)
        merged = {**current, **{k: v for k, v in changes.items() if v is not None}}
        conn.execute(
            """
            UPDATE notification_templates
            SET name = ?, subject = ?, content = ?, type = ?, variables_json = ?, is_active = ?
            WHERE id = ?
            """,
            (
                merged["name"],
                merged["subject"],
                merged["content"],
                merged["type"],
                json.dumps(extract_variables(merged["subject"], merged["content"])),
                1 if merged["is_active"] else 0,
                template_id,
            ),
        )
    merged["variables"] = extract_variables(merged["subject"], merged["content"])
    return merged


def delete_template(template_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        return conn.execute("DELETE FROM notification_templates WHERE id = ?", (template_id,)).rowcount > 0
