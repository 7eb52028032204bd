# -*- coding: utf-8 -*-
"""Auth — DB storage helpers."""

from __future__ import annotations

import secrets
import sqlite3
import string
from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn, utc_now
from ..config import settings

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_LENGTH = 8


def generate_referral_code() -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(_CODE_LENGTH))


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email.lower().strip(),)).fetchone()
        return dict(row) if row else None


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def get_user_by_referral_code(code: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE referral_code = ?", (code.strip().upper(),)
        ).fetchone()
        return dict(row) if row else None


def create_user(
    *,
    email: str,
    password_hash: str,
    role: str = "user",
    referred_by: Optional[str] = None,
) -> Dict[str, Any]:
    user_id = str(uuid4())
    now = utc_now()
    email_norm = email.lower().strip()
    with db_conn(settings.app_db_path) as conn:
        # Codes are random; retry on the rare unique-index collision.
        for _ in range(5):
            code = generate_referral_code()
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, role, referral_code, referred_by, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (user_id, email_norm, password_hash, role, code, referred_by, now),
                )
                break
            except sqlite3.IntegrityError as exc:
                if "referral_code" not in str(exc):
                    raise
        else:
            raise RuntimeError("could not allocate a unique referral code")
    return {
        "id": user_id,
        "email": email_norm,
        "password_hash": password_hash,
        "role": role,
        "referral_code": code,
        "referred_by": referred_by,
        "created_at": now,
    }
