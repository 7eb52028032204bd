# -*- coding: utf-8 -*-
"""
Derived nutrition metrics.

Pure functions over already-aggregated daily numbers: streaks, macro ratios,
the best macro day and the macro-consistency score. Nothing here touches the
database, so the same input always yields the same output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

# Reference day for the macro-day score: moderate carbs and fat.
MACRO_SCORE_CARBS_G = 150.0
MACRO_SCORE_FAT_G = 60.0


@dataclass(frozen=True)
class MacroDay:
    """Macronutrient grams eaten on one day."""
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.protein_g <= 0 and self.carbs_g <= 0 and self.fat_g <= 0


@dataclass
class DayTotals:
    """Running totals for one calendar day."""
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    meal_count: int = 0

    def macros(self) -> MacroDay:
        return MacroDay(self.protein_g, self.carbs_g, self.fat_g)


@dataclass(frozen=True)
class MacroShare:
    """Share of energy (percent) from protein, carbs and fat."""
    protein: float
    carbs: float
    fat: float


def daily_totals(meals: Iterable[Mapping[str, Any]]) -> Dict[str, DayTotals]:
    """
    Sum meals per calendar day.

    Args:
        meals: meal rows with `eaten_at` (ISO8601) and nutrition fields

    Returns:
        date (YYYY-MM-DD) -> DayTotals, ordered by date ascending
    """
    days: Dict[str, DayTotals] = {}
    for meal in meals:
        day = str(meal.get("eaten_at") or "")[:10]
        totals = days.setdefault(day, DayTotals())
        totals.calories += float(meal.get("calories") or 0.0)
        totals.protein_g += float(meal.get("protein_g") or 0.0)
        totals.carbs_g += float(meal.get("carbs_g") or 0.0)
        totals.fat_g += float(meal.get("fat_g") or 0.0)
        totals.meal_count += 1
    return {day: days[day] for day in sorted(days)}


def _in_range(value: float, low: float, high: float) -> bool:
    return low <= value <= high


def current_streak(calories_by_day: Sequence[float], low: float, high: float) -> int:
    """
    Count consecutive in-range days, walking back from the most recent day.

    Args:
        calories_by_day: calories per day, oldest first
        low: lower bound of the accepted window (inclusive)
        high: upper bound of the accepted window (inclusive)
    """
    streak = 0
    for calories in reversed(calories_by_day):
        if not _in_range(calories, low, high):
            break
        streak += 1
    return streak


def longest_streak(calories_by_day: Sequence[float], low: float, high: float) -> int:
    best = 0
    run = 0
    for calories in calories_by_day:
        if _in_range(calories, low, high):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def streak_window(daily_calories_goal: Optional[float], default_low: float, default_high: float) -> Tuple[float, float]:
    """Accepted calorie window: 75%–110% of the goal, or the defaults without one."""
    if not daily_calories_goal or daily_calories_goal <= 0:
        return default_low, default_high
    return round(daily_calories_goal * 0.75, 1), round(daily_calories_goal * 1.1, 1)


def macro_day_score(protein_g: float, carbs_g: float, fat_g: float) -> float:
    """High protein, carbs and fat close to the reference day."""
    return protein_g * 2 - abs(carbs_g - MACRO_SCORE_CARBS_G) - abs(fat_g - MACRO_SCORE_FAT_G)


def best_macro_day(macros_by_day: Mapping[str, MacroDay]) -> Optional[Tuple[str, float]]:
    """
    Day with the highest macro-day score.

    Returns:
        (day, score) or None for an empty mapping; the first day wins ties.
    """
    best_day: Optional[str] = None
    best_score = 0.0
    for day, macros in macros_by_day.items():
        score = macro_day_score(macros.protein_g, macros.carbs_g, macros.fat_g)
        if best_day is None or score > best_score:
            best_day, best_score = day, score
    if best_day is None:
        return None
    return best_day, round(best_score, 2)


def macro_ratio(protein_g: float, carbs_g: float, fat_g: float) -> Dict[str, int]:
    """Integer percentages of the gram total; all zeros when nothing was eaten."""
    total = protein_g + carbs_g + fat_g
    if total <= 0:
        return {"protein": 0, "carbs": 0, "fat": 0}
    return {
        "protein": round(protein_g / total * 100),
        "carbs": round(carbs_g / total * 100),
        "fat": round(fat_g / total * 100),
    }


def energy_share(macros: MacroDay) -> Optional[MacroShare]:
    protein_kcal = macros.protein_g * KCAL_PER_G_PROTEIN
    carbs_kcal = macros.carbs_g * KCAL_PER_G_CARBS
    fat_kcal = macros.fat_g * KCAL_PER_G_FAT
    total = protein_kcal + carbs_kcal + fat_kcal
    if total <= 0:
        return None
    return MacroShare(
        protein=protein_kcal / total * 100,
        carbs=carbs_kcal / total * 100,
        fat=fat_kcal / total * 100,
    )


def macro_consistency_score(days: Sequence[MacroDay], target: MacroDay) -> float:
    """
    How closely each day's energy split tracks the target split.

    Each non-empty day scores ``100 - sum(|actual% - target%|)`` (floored at
    zero) over protein, carbs and fat energy shares; the result is the mean
    day score rounded to one decimal, or 0.0 when no day has any intake.

    Args:
        days: macro grams per day
        target: goal grams per day (converted to an energy split)
    """
    target_share = energy_share(target)
    if target_share is None:
        return 0.0
    scores = []
    for day in days:
        share = energy_share(day)
        if share is None:
            continue
        deviation = (
            abs(share.protein - target_share.protein)
            + abs(share.carbs - target_share.carbs)
            + abs(share.fat - target_share.fat)
        )
        scores.append(max(0.0, 100.0 - deviation))
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 1)


def healthiest_day(calories_by_day: Mapping[str, float]) -> Optional[str]:
    """Lowest-calorie day that has any intake; ties keep the earlier day."""
    best_day: Optional[str] = None
    lowest = float("inf")
    for day, calories in calories_by_day.items():
        if 0 < calories < lowest:
            best_day = day
            lowest = calories
    return best_day
