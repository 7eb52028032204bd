# -*- coding: utf-8 -*-
"""Analytics — assemble derived metrics from a user's meals and goals.

Every builder takes an explicit `today` so callers (and tests) control the
window; the endpoints pass the current UTC date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..config import settings
from ..goals.storage import get_goals, get_goals_or_default
from ..meals.storage import compute_totals, list_meals
from ..workouts.storage import workout_totals
from . import metrics
from .models import (
    PERIOD_DAYS,
    AchievementsResponse,
    BestMacroDay,
    DailyPoint,
    DailySeriesResponse,
    DayMacros,
    MacroRatio,
    Period,
    TodayResponse,
    WeeklyStatsResponse,
)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
ACHIEVEMENT_WINDOW_DAYS = 7


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _window(today: date, days: int) -> List[date]:
    start = today - timedelta(days=days - 1)
    return [start + timedelta(days=i) for i in range(days)]


def _zero_filled(user_id: str, days: List[date]) -> Dict[str, metrics.DayTotals]:
    start, end = days[0].isoformat(), days[-1].isoformat()
    by_day = metrics.daily_totals(list_meals(user_id, start=start, end=end))
    return {d.isoformat(): by_day.get(d.isoformat(), metrics.DayTotals()) for d in days}


def streak_range(user_id: str) -> Tuple[float, float]:
    goals = get_goals(user_id)
    daily_calories = goals["daily_calories"] if goals else None
    return metrics.streak_window(daily_calories, settings.streak_low_kcal, settings.streak_high_kcal)


def build_daily_series(user_id: str, period: Period, *, today: Optional[date] = None) -> DailySeriesResponse:
    days = _window(today or utc_today(), PERIOD_DAYS[period])
    filled = _zero_filled(user_id, days)
    points = [
        DailyPoint(
            date=day,
            calories=round(t.calories, 1),
            protein_g=round(t.protein_g, 1),
            carbs_g=round(t.carbs_g, 1),
            fat_g=round(t.fat_g, 1),
            meal_count=t.meal_count,
        )
        for day, t in filled.items()
    ]
    return DailySeriesResponse(period=period, start=days[0].isoformat(), end=days[-1].isoformat(), days=points)


def build_today(user_id: str, *, today: Optional[date] = None) -> TodayResponse:
    day = (today or utc_today()).isoformat()
    meals = list_meals(user_id, start=day, end=day)
    totals = compute_totals(meals)
    goal = float(get_goals_or_default(user_id)["daily_calories"])
    return TodayResponse(
        date=day,
        totals=totals,
        meal_count=len(meals),
        calorie_goal=goal,
        remaining_calories=round(max(0.0, goal - totals.calories), 1),
    )


def week_start(today: date) -> date:
    # date.weekday() is Monday=0; shift so the week starts on Sunday.
    return today - timedelta(days=(today.weekday() + 1) % 7)


def build_weekly(user_id: str, *, today: Optional[date] = None) -> WeeklyStatsResponse:
    """
    Current-week stats keyed by day name.

    Averages are per tracked meal (not per day) and rounded to integers.
    """
    start = week_start(today or utc_today())
    end = start + timedelta(days=6)
    meals = list_meals(user_id, start=start.isoformat(), end=end.isoformat())

    calories_by_day: Dict[str, float] = {name: 0.0 for name in DAY_NAMES}
    macros_by_day: Dict[str, Dict[str, float]] = {
        name: {"protein": 0.0, "carbs": 0.0, "fat": 0.0} for name in DAY_NAMES
    }
    for meal in meals:
        eaten = date.fromisoformat(meal["eaten_at"][:10])
        name = DAY_NAMES[(eaten.weekday() + 1) % 7]
        calories_by_day[name] += float(meal["calories"] or 0.0)
        macros_by_day[name]["protein"] += float(meal["protein_g"] or 0.0)
        macros_by_day[name]["carbs"] += float(meal["carbs_g"] or 0.0)
        macros_by_day[name]["fat"] += float(meal["fat_g"] or 0.0)

    workouts_logged, calories_burned = workout_totals(user_id, start=start.isoformat(), end=end.isoformat())
    workout_goal = int(get_goals_or_default(user_id)["weekly_workouts"])

    tracked = len(meals)
    total_calories = sum(float(m["calories"] or 0.0) for m in meals)
    total_protein = sum(float(m["protein_g"] or 0.0) for m in meals)
    return WeeklyStatsResponse(
        week_starting=start.isoformat(),
        average_calories=round(total_calories / tracked) if tracked else 0,
        average_protein=round(total_protein / tracked) if tracked else 0,
        meals_tracked=tracked,
        healthiest_day=metrics.healthiest_day(calories_by_day),
        calories_by_day={k: round(v, 1) for k, v in calories_by_day.items()},
        macros_by_day={
            k: DayMacros(protein=round(v["protein"], 1), carbs=round(v["carbs"], 1), fat=round(v["fat"], 1))
            for k, v in macros_by_day.items()
        },
        workouts_logged=workouts_logged,
        calories_burned=round(calories_burned, 1),
        weekly_workout_goal=workout_goal,
        workout_goal_met=workouts_logged >= workout_goal,
    )


def build_achievements(user_id: str, *, today: Optional[date] = None) -> AchievementsResponse:
    days = _window(today or utc_today(), ACHIEVEMENT_WINDOW_DAYS)
    filled = _zero_filled(user_id, days)
    low, high = streak_range(user_id)
    calories = [t.calories for t in filled.values()]

    tracked = {day: t.macros() for day, t in filled.items() if t.meal_count}
    best = metrics.best_macro_day(tracked)

    protein = sum(t.protein_g for t in filled.values())
    carbs = sum(t.carbs_g for t in filled.values())
    fat = sum(t.fat_g for t in filled.values())

    goals: Dict[str, Any] = get_goals_or_default(user_id)
    target = metrics.MacroDay(
        protein_g=float(goals["daily_protein_g"]),
        carbs_g=float(goals["daily_carbs_g"]),
        fat_g=float(goals["daily_fat_g"]),
    )
    return AchievementsResponse(
        start=days[0].isoformat(),
        end=days[-1].isoformat(),
        streak_low_kcal=low,
        streak_high_kcal=high,
        current_streak=metrics.current_streak(calories, low, high),
        longest_streak=metrics.longest_streak(calories, low, high),
        best_macro_day=BestMacroDay(date=best[0], score=best[1]) if best else None,
        macro_ratio=MacroRatio(**metrics.macro_ratio(protein, carbs, fat)),
        macro_consistency_score=metrics.macro_consistency_score(list(tracked.values()), target),
    )
