# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from unittest import mock
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

from fastapi.testclient import TestClient

ADMIN_EMAIL = "admin@example.com"
PASSWORD = "password123"


class TestApiFlow(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="caltrack-test-"))
        data_root = cls._tmp / "data"
        os.environ["CALTRACK_DATA_ROOT"] = str(data_root)
        os.environ["CALTRACK_DB_PATH"] = str(data_root / "caltrack.db")
        os.environ["CALTRACK_JWT_SECRET"] = "test-secret"
        os.environ["CALTRACK_ADMIN_EMAILS"] = ADMIN_EMAIL
        os.environ.pop("CALTRACK_TRUSTED_PROXIES", None)
        os.environ.pop("CALTRACK_COMMISSION_RECURRING", None)
        os.environ.pop("CALTRACK_COMMISSION_PERCENT", None)

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "caltrack" or name.startswith("caltrack."):
                sys.modules.pop(name, None)

        from caltrack.api import app  # noqa: WPS433 (import inside test for env control)
        from caltrack import app_db  # noqa: WPS433
        from caltrack.config import settings  # noqa: WPS433

        cls.app_db = app_db
        cls.settings = settings

        cls.app = app
        cls.client = TestClient(app)
        cls.admin_token = cls._register_cls(ADMIN_EMAIL)["token"]

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    @classmethod
    def _register_cls(cls, email: str, referral_code: str | None = None) -> dict:
        body = {"email": email, "password": PASSWORD}
        if referral_code:
            body["referral_code"] = referral_code
        resp = cls.client.post("/api/auth/register", json=body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    def _register(self, referral_code: str | None = None) -> dict:
        return self._register_cls(f"{uuid4().hex[:10]}@example.com", referral_code)

    @staticmethod
    def _auth(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def _admin(self) -> dict:
        return self._auth(self.admin_token)

    def _meal(self, token: str, **overrides) -> dict:
        today = datetime.now(timezone.utc).date().isoformat()
        body = {
            "eaten_at": f"{today}T12:00:00Z",
            "meal_type": "lunch",
            "food_name": "Chicken salad",
            "calories": 550,
            "protein_g": 45,
            "carbs_g": 30,
            "fat_g": 22,
        }
        body.update(overrides)
        resp = self.client.post("/api/meals", json=body, headers=self._auth(token))
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    # Auth

    def test_auth_required(self) -> None:
        unauth = TestClient(self.app)
        self.assertEqual(unauth.get("/api/meals").status_code, 401)
        self.assertEqual(unauth.get("/api/health").status_code, 200)
        unauth.close()

    def test_register_login_and_me(self) -> None:
        email = f"{uuid4().hex[:10]}@example.com"
        registered = self._register_cls(email)
        self.assertEqual(registered["user"]["role"], "user")
        self.assertEqual(len(registered["user"]["referral_code"]), 8)

        resp = self.client.post("/api/auth/register", json={"email": email, "password": PASSWORD})
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/auth/login", json={"email": email, "password": "wrong-password"})
        self.assertEqual(resp.status_code, 401)

        events = self.client.get("/api/admin/security/events", headers=self._admin()).json()
        self.assertTrue(any(e["type"] == "failed_login" and e["email"] == email for e in events))

        resp = self.client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        self.assertEqual(resp.status_code, 200)
        me = self.client.get("/api/auth/me", headers=self._auth(resp.json()["token"]))
        self.assertEqual(me.json()["email"], email)

    def test_unknown_referral_code_rejected(self) -> None:
        resp = self.client.post(
            "/api/auth/register",
            json={"email": f"{uuid4().hex[:10]}@example.com", "password": PASSWORD, "referral_code": "NOPE0000"},
        )
        self.assertEqual(resp.status_code, 400)

    # Meals, goals, analytics

    def test_meal_crud_and_ownership(self) -> None:
        token = self._register()["token"]
        other = self._register()["token"]
        meal = self._meal(token)

        resp = self.client.get("/api/meals", headers=self._auth(token))
        self.assertEqual(resp.json()["count"], 1)

        resp = self.client.put(f"/api/meals/{meal['id']}", json={"calories": 610}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["calories"], 610)
        self.assertEqual(resp.json()["food_name"], "Chicken salad")

        self.assertEqual(self.client.get(f"/api/meals/{meal['id']}", headers=self._auth(other)).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/meals/{meal['id']}", headers=self._auth(other)).status_code, 404)

        resp = self.client.delete(f"/api/meals/{meal['id']}", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/api/meals", headers=self._auth(token)).json()["count"], 0)

    def test_meal_validation(self) -> None:
        token = self._register()["token"]
        resp = self.client.post(
            "/api/meals",
            json={"eaten_at": "yesterday", "meal_type": "lunch", "food_name": "x", "calories": 1},
            headers=self._auth(token),
        )
        self.assertEqual(resp.status_code, 422)
        resp = self.client.post(
            "/api/meals",
            json={"eaten_at": "2024-01-01T10:00:00Z", "meal_type": "lunch", "food_name": "x", "calories": -5},
            headers=self._auth(token),
        )
        self.assertEqual(resp.status_code, 422)

    def test_meal_summary(self) -> None:
        token = self._register()["token"]
        self._meal(token, eaten_at="2024-05-01T08:00:00Z", calories=400)
        self._meal(token, eaten_at="2024-05-01T19:00:00Z", calories=700)
        self._meal(token, eaten_at="2024-05-03T12:00:00Z", calories=500)

        resp = self.client.get("/api/meals/summary?start=2024-05-01&end=2024-05-03", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["totals"]["calories"], 1600)
        self.assertEqual([d["date"] for d in data["days"]], ["2024-05-01", "2024-05-03"])
        self.assertEqual(data["days"][0]["meal_count"], 2)

        resp = self.client.get("/api/meals/summary?start=2024-05-03&end=2024-05-01", headers=self._auth(token))
        self.assertEqual(resp.status_code, 400)

    def test_meal_list_pages_in_order(self) -> None:
        token = self._register()["token"]
        for hour in ("08", "12", "19"):
            self._meal(token, eaten_at=f"2024-06-01T{hour}:00:00Z", food_name=f"meal {hour}")

        resp = self.client.get("/api/meals?limit=2&offset=1", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["count"], 3)
        self.assertEqual([m["food_name"] for m in data["meals"]], ["meal 12", "meal 08"])

        resp = self.client.get("/api/meals?start=2024-06-02", headers=self._auth(token))
        self.assertEqual(resp.json()["count"], 0)

    def test_planned_meals_crud(self) -> None:
        token = self._register()["token"]
        other = self._register()["token"]
        body = {"planned_date": "2024-07-02", "meal_type": "dinner", "meal_name": "Salmon bowl", "calories": 640}
        resp = self.client.post("/api/planned-meals", json=body, headers=self._auth(token))
        self.assertEqual(resp.status_code, 201, resp.text)
        planned = resp.json()
        self.client.post(
            "/api/planned-meals",
            json={**body, "planned_date": "2024-07-09", "meal_name": "Out of range"},
            headers=self._auth(token),
        )

        resp = self.client.get("/api/planned-meals?start=2024-07-01&end=2024-07-07", headers=self._auth(token))
        self.assertEqual([p["meal_name"] for p in resp.json()["planned_meals"]], ["Salmon bowl"])
        self.assertEqual(self.client.get("/api/planned-meals", headers=self._auth(token)).status_code, 422)
        resp = self.client.get("/api/planned-meals?start=2024-07-07&end=2024-07-01", headers=self._auth(token))
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(
            "/api/planned-meals", json={**body, "planned_date": "2024-07-02T10:00:00Z"}, headers=self._auth(token)
        )
        self.assertEqual(resp.status_code, 422)

        resp = self.client.put(
            f"/api/planned-meals/{planned['id']}", json={"calories": 700}, headers=self._auth(other)
        )
        self.assertEqual(resp.status_code, 404)
        resp = self.client.put(
            f"/api/planned-meals/{planned['id']}", json={"calories": 700}, headers=self._auth(token)
        )
        self.assertEqual(resp.json()["calories"], 700)
        self.assertIsNotNone(resp.json()["updated_at"])

        resp = self.client.delete(f"/api/planned-meals/{planned['id']}", headers=self._auth(token))
        self.assertEqual(resp.status_code, 204)
        resp = self.client.delete(f"/api/planned-meals/{planned['id']}", headers=self._auth(token))
        self.assertEqual(resp.status_code, 404)

    def test_workouts_feed_weekly_stats(self) -> None:
        token = self._register()["token"]
        goals = {
            "daily_calories": 2000,
            "daily_protein_g": 150,
            "daily_carbs_g": 200,
            "daily_fat_g": 65,
            "weekly_workouts": 2,
        }
        self.client.put("/api/nutrition-goals", json=goals, headers=self._auth(token))

        resp = self.client.post(
            "/api/workouts", json={"name": "Run", "duration_min": 30, "calories_burned": 300}, headers=self._auth(token)
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        run = resp.json()
        weekly = self.client.get("/api/analytics/weekly", headers=self._auth(token)).json()
        self.assertEqual(weekly["workouts_logged"], 1)
        self.assertEqual(weekly["weekly_workout_goal"], 2)
        self.assertFalse(weekly["workout_goal_met"])

        self.client.post(
            "/api/workouts", json={"name": "Swim", "duration_min": 45, "calories_burned": 400}, headers=self._auth(token)
        )
        weekly = self.client.get("/api/analytics/weekly", headers=self._auth(token)).json()
        self.assertEqual(weekly["workouts_logged"], 2)
        self.assertEqual(weekly["calories_burned"], 700)
        self.assertTrue(weekly["workout_goal_met"])

        self.assertEqual(self.client.get("/api/workouts", headers=self._auth(token)).json()["count"], 2)
        resp = self.client.post(
            "/api/workouts", json={"name": "Nap", "duration_min": 0, "calories_burned": 0}, headers=self._auth(token)
        )
        self.assertEqual(resp.status_code, 422)

        other = self._register()["token"]
        self.assertEqual(self.client.delete(f"/api/workouts/{run['id']}", headers=self._auth(other)).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/workouts/{run['id']}", headers=self._auth(token)).status_code, 200)
        weekly = self.client.get("/api/analytics/weekly", headers=self._auth(token)).json()
        self.assertEqual(weekly["calories_burned"], 400)

    def test_goals_default_then_upsert(self) -> None:
        token = self._register()["token"]
        resp = self.client.get("/api/nutrition-goals", headers=self._auth(token))
        self.assertTrue(resp.json()["is_default"])
        self.assertEqual(resp.json()["daily_calories"], 2000)

        goals = {"daily_calories": 1800, "daily_protein_g": 120, "daily_carbs_g": 180, "daily_fat_g": 60}
        resp = self.client.put("/api/nutrition-goals", json=goals, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get("/api/nutrition-goals", headers=self._auth(token))
        self.assertFalse(resp.json()["is_default"])
        self.assertEqual(resp.json()["daily_calories"], 1800)

        resp = self.client.put("/api/nutrition-goals", json={**goals, "daily_calories": 0}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 422)

    def test_analytics_daily_today_and_achievements(self) -> None:
        token = self._register()["token"]
        today = datetime.now(timezone.utc).date().isoformat()
        self._meal(token, calories=900)
        self._meal(token, calories=900, meal_type="dinner")

        resp = self.client.get("/api/analytics/daily?period=week", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        days = resp.json()["days"]
        self.assertEqual(len(days), 7)
        self.assertEqual(days[-1]["date"], today)
        self.assertEqual(days[-1]["calories"], 1800)
        self.assertEqual(days[-1]["meal_count"], 2)
        self.assertTrue(all(d["calories"] == 0 for d in days[:-1]))

        self.assertEqual(len(self.client.get("/api/analytics/daily?period=month", headers=self._auth(token)).json()["days"]), 30)
        self.assertEqual(self.client.get("/api/analytics/daily?period=decade", headers=self._auth(token)).status_code, 422)

        resp = self.client.get("/api/analytics/today", headers=self._auth(token))
        self.assertEqual(resp.json()["totals"]["calories"], 1800)
        self.assertEqual(resp.json()["remaining_calories"], 200)

        resp = self.client.get("/api/analytics/achievements", headers=self._auth(token))
        data = resp.json()
        self.assertEqual(data["current_streak"], 1)
        self.assertEqual(data["longest_streak"], 1)
        self.assertEqual(data["best_macro_day"]["date"], today)
        self.assertEqual(sum(data["macro_ratio"].values()), 100)

        resp = self.client.get("/api/analytics/weekly", headers=self._auth(token))
        data = resp.json()
        self.assertEqual(data["meals_tracked"], 2)
        self.assertEqual(data["average_calories"], 900)
        self.assertEqual(sum(data["calories_by_day"].values()), 1800)
        self.assertEqual(len(data["macros_by_day"]), 7)

    # Subscriptions and referrals

    def test_referral_commission_end_to_end(self) -> None:
        referrer = self._register()
        referee = self._register(referral_code=referrer["user"]["referral_code"])
        self.assertEqual(referee["user"]["referred_by"], referrer["user"]["id"])

        resp = self.client.post(
            "/api/subscriptions", json={"plan": "monthly", "amount": "9.99"}, headers=self._auth(referee["token"])
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        subscription_id = resp.json()["subscription"]["id"]
        commission_id = resp.json()["commission_id"]
        self.assertIsNotNone(commission_id)

        commissions = self.client.get("/api/referrals/commissions", headers=self._auth(referrer["token"])).json()
        self.assertEqual(len(commissions), 1)
        self.assertEqual(Decimal(str(commissions[0]["amount"])), Decimal("1.00"))
        self.assertEqual(commissions[0]["status"], "pending")

        # One-time program: renewals earn nothing.
        resp = self.client.post(f"/api/subscriptions/{subscription_id}/renew", headers=self._auth(referee["token"]))
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["commission_id"])

        resp = self.client.put(
            "/api/admin/referral/settings",
            json={"commission_percent": 20, "is_recurring": True},
            headers=self._admin(),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["is_recurring"])

        resp = self.client.post(f"/api/subscriptions/{subscription_id}/renew", headers=self._auth(referee["token"]))
        renewal_id = resp.json()["commission_id"]
        self.assertIsNotNone(renewal_id)

        ledger = self.client.get("/api/admin/referral/commissions", headers=self._admin()).json()
        ours = {c["id"]: c for c in ledger["commissions"] if c["referrer_id"] == referrer["user"]["id"]}
        self.assertEqual(set(ours), {commission_id, renewal_id})
        self.assertEqual(ours[renewal_id]["referee_email"], referee["user"]["email"])
        self.assertTrue(ours[renewal_id]["is_recurring"])
        self.assertEqual(Decimal(str(ours[renewal_id]["amount"])), Decimal("2.00"))

        resp = self.client.post(f"/api/admin/referral/commissions/{commission_id}/pay", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "paid")
        self.assertIsNotNone(resp.json()["paid_at"])
        resp = self.client.post(f"/api/admin/referral/commissions/{commission_id}/pay", headers=self._admin())
        self.assertEqual(resp.status_code, 409)
        resp = self.client.post(f"/api/admin/referral/commissions/{commission_id}/cancel", headers=self._admin())
        self.assertEqual(resp.status_code, 409)
        resp = self.client.post("/api/admin/referral/commissions/999999/pay", headers=self._admin())
        self.assertEqual(resp.status_code, 404)

        summary = self.client.get("/api/referrals/summary", headers=self._auth(referrer["token"])).json()
        self.assertEqual(summary["referral_count"], 1)
        self.assertEqual(Decimal(str(summary["paid_total"])), Decimal("1.00"))
        self.assertEqual(Decimal(str(summary["pending_total"])), Decimal("2.00"))

        paid = self.client.get("/api/admin/referral/commissions?status=paid", headers=self._admin()).json()
        self.assertTrue(all(c["status"] == "paid" for c in paid["commissions"]))

        self.client.put(
            "/api/admin/referral/settings",
            json={"commission_percent": 10, "is_recurring": False},
            headers=self._admin(),
        )

    def test_commission_with_unlisted_status_is_listed(self) -> None:
        referrer = self._register()
        referee = self._register(referral_code=referrer["user"]["referral_code"])
        with self.app_db.db_conn(self.settings.app_db_path) as conn:
            conn.execute(
                """
                INSERT INTO referral_commissions
                    (referrer_id, referee_id, subscription_id, amount_cents, status, created_at)
                VALUES (?, ?, ?, 150, 'on_hold', ?)
                """,
                (referrer["user"]["id"], referee["user"]["id"], uuid4().hex, self.app_db.utc_now()),
            )

        resp = self.client.get("/api/admin/referral/commissions", headers=self._admin())
        self.assertEqual(resp.status_code, 200, resp.text)
        ours = [c for c in resp.json()["commissions"] if c["referrer_id"] == referrer["user"]["id"]]
        self.assertEqual([c["status"] for c in ours], ["on_hold"])

        resp = self.client.get("/api/referrals/commissions", headers=self._auth(referrer["token"]))
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()[0]["status"], "on_hold")

    def test_subscription_cancel_moves_user_out_of_premium(self) -> None:
        def premium_count() -> int:
            resp = self.client.post(
                "/api/admin/notifications",
                json={"title": "Premium", "message": "x", "recipients": {"type": "premium"}},
                headers=self._admin(),
            )
            return resp.json()["recipient_count"]

        before = premium_count()
        user = self._register()
        resp = self.client.post(
            "/api/subscriptions", json={"plan": "monthly", "amount": "4.99"}, headers=self._auth(user["token"])
        )
        subscription_id = resp.json()["subscription"]["id"]
        self.assertEqual(premium_count(), before + 1)

        other = self._register()["token"]
        resp = self.client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=self._auth(other))
        self.assertEqual(resp.status_code, 404)

        resp = self.client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=self._auth(user["token"]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "cancelled")
        self.assertIsNotNone(resp.json()["cancelled_at"])
        self.assertEqual(premium_count(), before)

        resp = self.client.post(f"/api/subscriptions/{subscription_id}/cancel", headers=self._auth(user["token"]))
        self.assertEqual(resp.status_code, 409)
        resp = self.client.post(f"/api/subscriptions/{subscription_id}/renew", headers=self._auth(user["token"]))
        self.assertEqual(resp.status_code, 409)

    def test_admin_can_cancel_any_subscription(self) -> None:
        user = self._register()
        resp = self.client.post(
            "/api/subscriptions", json={"plan": "yearly", "amount": "49.00"}, headers=self._auth(user["token"])
        )
        subscription_id = resp.json()["subscription"]["id"]

        resp = self.client.post(f"/api/admin/subscriptions/{subscription_id}/cancel", headers=self._auth(user["token"]))
        self.assertEqual(resp.status_code, 403)
        resp = self.client.post(f"/api/admin/subscriptions/{subscription_id}/cancel", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "cancelled")
        resp = self.client.post("/api/admin/subscriptions/missing/cancel", headers=self._admin())
        self.assertEqual(resp.status_code, 404)

    def test_referral_settings_validation(self) -> None:
        resp = self.client.put(
            "/api/admin/referral/settings",
            json={"commission_percent": 150, "is_recurring": False},
            headers=self._admin(),
        )
        self.assertEqual(resp.status_code, 422)

    # Admin console

    def test_admin_routes_reject_regular_users(self) -> None:
        token = self._register()["token"]
        for path in (
            "/api/admin/referral/settings",
            "/api/admin/notifications/stats",
            "/api/admin/security/metrics",
            "/api/admin/activity",
            "/api/admin/system/health",
        ):
            self.assertEqual(self.client.get(path, headers=self._auth(token)).status_code, 403, path)

    def test_blocked_ip_is_refused(self) -> None:
        ip = "203.0.113.7"
        resp = self.client.post(
            "/api/admin/security/block-ip", json={"ip_address": ip, "reason": "abuse"}, headers=self._admin()
        )
        self.assertEqual(resp.status_code, 201)
        block_id = resp.json()["blocked_ip"]["id"]

        resp = self.client.post(
            "/api/admin/security/block-ip", json={"ip_address": ip, "reason": "again"}, headers=self._admin()
        )
        self.assertEqual(resp.status_code, 400)

        with mock.patch.object(self.settings, "trusted_proxies", ["testclient", "10.0.0.2"]):
            resp = self.client.get("/api/auth/me", headers={**self._admin(), "x-forwarded-for": f"{ip}, 10.0.0.2"})
            self.assertEqual(resp.status_code, 403)

            resp = self.client.delete(f"/api/admin/security/unblock-ip/{block_id}", headers=self._admin())
            self.assertEqual(resp.status_code, 200)
            resp = self.client.get("/api/auth/me", headers={**self._admin(), "x-forwarded-for": ip})
            self.assertEqual(resp.status_code, 200)

        blocks = self.client.get("/api/admin/security/blocked-ips", headers=self._admin()).json()
        self.assertTrue(any(b["id"] == block_id and not b["is_active"] for b in blocks))

    def test_forwarded_header_ignored_from_untrusted_peer(self) -> None:
        resp = self.client.post(
            "/api/admin/security/block-ip", json={"ip_address": "203.0.113.8", "reason": "abuse"}, headers=self._admin()
        )
        self.assertEqual(resp.status_code, 201)
        block_id = resp.json()["blocked_ip"]["id"]

        # Blocked address claimed through the header; the socket peer decides.
        resp = self.client.get("/api/auth/me", headers={**self._admin(), "x-forwarded-for": "203.0.113.8"})
        self.assertEqual(resp.status_code, 200)

        email = f"{uuid4().hex[:10]}@example.com"
        self._register_cls(email)
        self.client.post(
            "/api/auth/login",
            json={"email": email, "password": "wrong-password"},
            headers={"x-forwarded-for": "198.51.100.9"},
        )
        events = self.client.get("/api/admin/security/events", headers=self._admin()).json()
        failed = [e for e in events if e["type"] == "failed_login" and e["email"] == email]
        self.assertEqual([e["ip_address"] for e in failed], ["testclient"])

        self.client.delete(f"/api/admin/security/unblock-ip/{block_id}", headers=self._admin())

    def test_cannot_block_own_address(self) -> None:
        resp = self.client.post(
            "/api/admin/security/block-ip", json={"ip_address": "testclient", "reason": "oops"}, headers=self._admin()
        )
        self.assertEqual(resp.status_code, 400)

        with mock.patch.object(self.settings, "trusted_proxies", ["testclient"]):
            resp = self.client.post(
                "/api/admin/security/block-ip",
                json={"ip_address": "198.51.100.10", "reason": "oops"},
                headers={**self._admin(), "x-forwarded-for": "198.51.100.10"},
            )
            self.assertEqual(resp.status_code, 400)

        self.assertEqual(self.client.get("/api/auth/me", headers=self._admin()).status_code, 200)
        self.assertEqual(self._register()["user"]["role"], "user")

    def test_security_report_formats(self) -> None:
        resp = self.client.get("/api/admin/security/report?time_range=7d", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["time_range"], "7d")
        resp = self.client.get("/api/admin/security/report?time_range=7d&format=csv", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertIn("text/csv", resp.headers["content-type"])
        resp = self.client.get("/api/admin/security/report?time_range=1y", headers=self._admin())
        self.assertEqual(resp.status_code, 422)

    def test_notifications_lifecycle(self) -> None:
        resp = self.client.post(
            "/api/admin/notifications",
            json={"title": "Maintenance", "message": "Down at 2 AM", "recipients": {"type": "all"}},
            headers=self._admin(),
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        notification = resp.json()
        self.assertEqual(notification["status"], "draft")
        self.assertGreaterEqual(notification["recipient_count"], 1)

        resp = self.client.post(
            "/api/admin/notifications",
            json={"title": "Hi", "message": "x", "recipients": {"type": "custom", "custom_list": ["a@x.io", "b@x.io"]}},
            headers=self._admin(),
        )
        self.assertEqual(resp.json()["recipient_count"], 2)

        resp = self.client.post("/api/admin/notifications", json={"title": "", "message": "x"}, headers=self._admin())
        self.assertEqual(resp.status_code, 422)

        resp = self.client.post(f"/api/admin/notifications/{notification['id']}/send", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "sent")
        self.assertIsNotNone(resp.json()["sent_at"])
        resp = self.client.post(f"/api/admin/notifications/{notification['id']}/send", headers=self._admin())
        self.assertEqual(resp.status_code, 400)

        sent = self.client.get("/api/admin/notifications?status=sent", headers=self._admin()).json()
        self.assertIn(notification["id"], [n["id"] for n in sent])
        stats = self.client.get("/api/admin/notifications/stats", headers=self._admin()).json()
        self.assertGreaterEqual(stats["total_sent"], 1)

        resp = self.client.delete(f"/api/admin/notifications/{notification['id']}", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        resp = self.client.delete(f"/api/admin/notifications/{notification['id']}", headers=self._admin())
        self.assertEqual(resp.status_code, 404)

    def test_templates_extract_variables(self) -> None:
        resp = self.client.post(
            "/api/admin/notifications/templates",
            json={"name": "Welcome", "subject": "Welcome to {{siteName}}!", "content": "Hello {{userName}} from {{siteName}}"},
            headers=self._admin(),
        )
        self.assertEqual(resp.status_code, 201)
        template = resp.json()
        self.assertEqual(template["variables"], ["siteName", "userName"])

        resp = self.client.put(
            f"/api/admin/notifications/templates/{template['id']}",
            json={"content": "Your code is {{code}}"},
            headers=self._admin(),
        )
        self.assertEqual(resp.json()["variables"], ["siteName", "code"])

    def test_activity_and_system_health(self) -> None:
        token = self._register()["token"]
        self._meal(token)

        resp = self.client.get("/api/admin/activity?action=meal_logged", headers=self._admin())
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(all(e["action"] == "meal_logged" for e in resp.json()["entries"]))
        self.assertGreaterEqual(resp.json()["count"], 1)

        summary = self.client.get("/api/admin/activity/summary", headers=self._admin()).json()
        self.assertGreaterEqual(summary["by_action"]["register"], 1)

        health = self.client.get("/api/admin/system/health", headers=self._admin()).json()
        self.assertEqual(health["status"], "ok")
        self.assertGreater(health["database_size_bytes"], 0)
        self.assertGreaterEqual(health["row_counts"]["users"], 2)


if __name__ == "__main__":
    unittest.main()
