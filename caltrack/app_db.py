# -*- coding: utf-8 -*-
"""App database — SQLite helpers and schema."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from .config import settings


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def iso_utc(moment: datetime) -> str:
    # Fixed-width timestamps so stored values compare correctly as strings.
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def utc_now() -> str:
    return iso_utc(datetime.now(timezone.utc))


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                role TEXT NOT NULL DEFAULT 'user',
                referral_code TEXT NOT NULL,
                referred_by TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY(referred_by) REFERENCES users(id) ON DELETE SET NULL
            );
            """
        )
        cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_users_referral_code ON users(referral_code);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_users_referred_by ON users(referred_by);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS meals (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                eaten_at TEXT NOT NULL,
                meal_type TEXT NOT NULL,
                food_name TEXT NOT NULL,
                calories REAL NOT NULL DEFAULT 0 CHECK (calories >= 0),
                protein_g REAL NOT NULL DEFAULT 0 CHECK (protein_g >= 0),
                carbs_g REAL NOT NULL DEFAULT 0 CHECK (carbs_g >= 0),
                fat_g REAL NOT NULL DEFAULT 0 CHECK (fat_g >= 0),
                notes TEXT,
                source TEXT NOT NULL DEFAULT 'manual',
                created_at TEXT NOT NULL,
                updated_at TEXT,
                FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_meals_user_eaten ON meals(user_id, eaten_at DESC);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                duration_min INTEGER NOT NULL CHECK (duration_min > 0),
                calories_burned REAL NOT NULL CHECK (calories_burned >= 0),
                performed_at TEXT NOT NULL,
                notes TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_workouts_user_performed ON workouts(user_id, performed_at DESC);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS planned_meals (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                planned_date TEXT NOT NULL,
                meal_type TEXT NOT NULL,
                meal_name TEXT NOT NULL,
                calories REAL NOT NULL DEFAULT 0 CHECK (calories >= 0),
                protein_g REAL NOT NULL DEFAULT 0 CHECK (protein_g >= 0),
                carbs_g REAL NOT NULL DEFAULT 0 CHECK (carbs_g >= 0),
                fat_g REAL NOT NULL DEFAULT 0 CHECK (fat_g >= 0),
                recipe TEXT,
                notes TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT,
                FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_planned_meals_user_date ON planned_meals(user_id, planned_date);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS nutrition_goals (
                user_id TEXT PRIMARY KEY,
                daily_calories REAL NOT NULL,
                daily_protein_g REAL NOT NULL,
                daily_carbs_g REAL NOT NULL,
                daily_fat_g REAL NOT NULL,
                weekly_workouts INTEGER NOT NULL DEFAULT 3,
                water_intake_ml INTEGER NOT NULL DEFAULT 2000,
                updated_at TEXT NOT NULL,
                FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS subscriptions (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                plan TEXT NOT NULL,
                amount_cents INTEGER NOT NULL CHECK (amount_cents >= 0),
                status TEXT NOT NULL DEFAULT 'active',
                created_at TEXT NOT NULL,
                renewed_at TEXT,
                cancelled_at TEXT,
                FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_subscriptions_user ON subscriptions(user_id, created_at DESC);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS referral_settings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                commission_percent TEXT NOT NULL DEFAULT '10.00',
                is_recurring INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        # Ledger rows: amount in cents, paid_at only with status 'paid', no self-referral, no deletes.
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS referral_commissions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                referrer_id TEXT NOT NULL,
                referee_id TEXT NOT NULL,
                subscription_id TEXT NOT NULL,
                amount_cents INTEGER NOT NULL DEFAULT 0 CHECK (amount_cents >= 0),
                status TEXT NOT NULL DEFAULT 'pending',
                is_recurring INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                paid_at TEXT,
                CHECK (referrer_id <> referee_id),
                CHECK (
                    (status = 'paid' AND paid_at IS NOT NULL)
                    OR (status <> 'paid' AND paid_at IS NULL)
                ),
                FOREIGN KEY(referrer_id) REFERENCES users(id),
                FOREIGN KEY(referee_id) REFERENCES users(id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_referral_commissions_referrer_id ON referral_commissions(referrer_id);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_referral_commissions_referee_id ON referral_commissions(referee_id);"
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_referral_commissions_status ON referral_commissions(status);")
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_referral_commissions_created_at ON referral_commissions(created_at);"
        )
        cur.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_referral_commissions_event "
            "ON referral_commissions(subscription_id, referee_id);"
        )
        cur.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_referral_commissions_no_delete
            BEFORE DELETE ON referral_commissions
            BEGIN
                SELECT RAISE(ABORT, 'referral commissions are never deleted');
            END;
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS notifications (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                message TEXT NOT NULL,
                type TEXT NOT NULL DEFAULT 'info',
                priority TEXT NOT NULL DEFAULT 'medium',
                status TEXT NOT NULL DEFAULT 'draft',
                channels_json TEXT NOT NULL,
                recipient_type TEXT NOT NULL DEFAULT 'all',
                recipient_count INTEGER NOT NULL DEFAULT 0,
                scheduled_at TEXT,
                sent_at TEXT,
                created_at TEXT NOT NULL,
                created_by TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_notifications_status_created ON notifications(status, created_at DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS notification_templates (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                subject TEXT NOT NULL,
                content TEXT NOT NULL,
                type TEXT NOT NULL DEFAULT 'email',
                variables_json TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS security_events (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                severity TEXT NOT NULL,
                user_id TEXT,
                email TEXT,
                ip_address TEXT,
                user_agent TEXT,
                details TEXT,
                status TEXT NOT NULL DEFAULT 'pending',
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_security_events_created ON security_events(created_at DESC);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS blocked_ips (
                id TEXT PRIMARY KEY,
                ip_address TEXT NOT NULL,
                reason TEXT NOT NULL,
                blocked_at TEXT NOT NULL,
                blocked_by TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                unblocked_at TEXT
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_blocked_ips_ip_active ON blocked_ips(ip_address, is_active);")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS activity_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                action TEXT NOT NULL,
                details_json TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_activity_log_created ON activity_log(created_at DESC);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_activity_log_action ON activity_log(action);")

        row = cur.execute("SELECT COUNT(*) FROM referral_settings").fetchone()
        if not row[0]:
            now = utc_now()
            cur.execute(
                "INSERT INTO referral_settings (commission_percent, is_recurring, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (
                    settings.default_commission_percent,
                    1 if settings.default_commission_recurring else 0,
                    now,
                    now,
                ),
            )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path or settings.app_db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
