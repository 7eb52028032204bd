# -*- coding: utf-8 -*-
"""System monitor — process uptime and database health for admins."""

from __future__ import annotations

import platform
import time
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .. import __version__
from ..app_db import db_conn, utc_now
from ..auth.security import require_admin
from ..config import settings

_STARTED_AT = time.monotonic()

MONITORED_TABLES = (
    "users",
    "meals",
    "planned_meals",
    "workouts",
    "nutrition_goals",
    "subscriptions",
    "referral_commissions",
    "notifications",
    "notification_templates",
    "security_events",
    "blocked_ips",
    "activity_log",
)

router = APIRouter(prefix="/api/admin/system", tags=["Admin System"], dependencies=[Depends(require_admin)])


class SystemHealth(BaseModel):
    status: str
    version: str
    python_version: str
    timestamp: str
    uptime_seconds: float
    database_path: str
    database_size_bytes: int
    row_counts: Dict[str, int]


def uptime_seconds() -> float:
    return round(time.monotonic() - _STARTED_AT, 1)


def row_counts() -> Dict[str, int]:
    with db_conn(settings.app_db_path) as conn:
        return {table: int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]) for table in MONITORED_TABLES}


@router.get("/health", response_model=SystemHealth, summary="Uptime, database size and row counts")
def system_health():
    db_path = settings.app_db_path
    return SystemHealth(
        status="ok",
        version=__version__,
        python_version=platform.python_version(),
        timestamp=utc_now(),
        uptime_seconds=uptime_seconds(),
        database_path=str(db_path),
        database_size_bytes=db_path.stat().st_size if db_path.exists() else 0,
        row_counts=row_counts(),
    )
