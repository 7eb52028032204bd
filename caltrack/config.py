from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the calorie tracker backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("CALTRACK_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("CALTRACK_DB_PATH") or (self.data_root / "caltrack.db")
        ).expanduser()
        # In production you MUST set CALTRACK_JWT_SECRET. The dev secret only keeps local demos easy.
        self.jwt_secret: str = os.environ.get("CALTRACK_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("CALTRACK_TOKEN_TTL_DAYS") or "7")
        self.cookie_secure: bool = (os.environ.get("CALTRACK_COOKIE_SECURE") or "").strip() in {"1", "true", "True"}
        self.log_level: str = (os.environ.get("CALTRACK_LOG_LEVEL") or "INFO").upper()

        admins = os.environ.get("CALTRACK_ADMIN_EMAILS") or ""
        self.admin_emails: List[str] = [
            email.strip().lower() for email in admins.split(",") if email.strip()
        ]

        # Calorie window that counts towards a streak when the user has no goals.
        self.streak_low_kcal: float = float(os.environ.get("CALTRACK_STREAK_LOW") or "1500")
        self.streak_high_kcal: float = float(os.environ.get("CALTRACK_STREAK_HIGH") or "2200")

        # Seed values for the referral program (first init only).
        self.default_commission_percent: str = os.environ.get("CALTRACK_COMMISSION_PERCENT") or "10.00"
        self.default_commission_recurring: bool = (
            (os.environ.get("CALTRACK_COMMISSION_RECURRING") or "").strip() in {"1", "true", "True"}
        )

        self.host: str = os.environ.get("CALTRACK_HOST") or os.environ.get("HOST") or "127.0.0.1"
        self.port_raw: str = os.environ.get("CALTRACK_PORT") or os.environ.get("PORT") or "8000"

        # Peers allowed to set X-Forwarded-For; any other peer is taken at its socket address.
        proxies = os.environ.get("CALTRACK_TRUSTED_PROXIES") or ""
        self.trusted_proxies: List[str] = [p.strip() for p in proxies.split(",") if p.strip()]

        cors = os.environ.get("CALTRACK_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
