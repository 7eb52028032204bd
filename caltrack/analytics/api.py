# -*- coding: utf-8 -*-
"""Analytics — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import AchievementsResponse, DailySeriesResponse, Period, TodayResponse, WeeklyStatsResponse
from .service import build_achievements, build_daily_series, build_today, build_weekly

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("/daily", response_model=DailySeriesResponse, summary="Zero-filled daily totals for a period")
def daily(
    period: Period = Query(default=Period.week, description="week | month | year"),
    user: dict = Depends(get_current_user),
):
    return build_daily_series(user["id"], period)


@router.get("/today", response_model=TodayResponse, summary="Today's totals against the calorie goal")
def today(user: dict = Depends(get_current_user)):
    return build_today(user["id"])


@router.get("/weekly", response_model=WeeklyStatsResponse, summary="Current week (Sunday start) statistics")
def weekly(user: dict = Depends(get_current_user)):
    return build_weekly(user["id"])


@router.get("/achievements", response_model=AchievementsResponse, summary="Streaks and macro balance, last 7 days")
def achievements(user: dict = Depends(get_current_user)):
    return build_achievements(user["id"])
