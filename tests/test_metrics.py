# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from caltrack.analytics.metrics import (
    MacroDay,
    best_macro_day,
    current_streak,
    daily_totals,
    healthiest_day,
    longest_streak,
    macro_consistency_score,
    macro_day_score,
    macro_ratio,
    streak_window,
)


class TestStreaks(unittest.TestCase):
    def test_current_streak_walks_back_from_last_day(self) -> None:
        calories = [1800, 3000, 1600, 1900, 2100]
        self.assertEqual(current_streak(calories, 1500, 2200), 3)

    def test_current_streak_breaks_on_last_day(self) -> None:
        self.assertEqual(current_streak([1800, 1900, 0], 1500, 2200), 0)

    def test_bounds_are_inclusive(self) -> None:
        self.assertEqual(current_streak([1500, 2200], 1500, 2200), 2)
        self.assertEqual(longest_streak([1499, 2201], 1500, 2200), 0)

    def test_longest_streak(self) -> None:
        calories = [1600, 1700, 0, 1800, 1900, 2000, 2500, 1600]
        self.assertEqual(longest_streak(calories, 1500, 2200), 3)

    def test_empty_history(self) -> None:
        self.assertEqual(current_streak([], 1500, 2200), 0)
        self.assertEqual(longest_streak([], 1500, 2200), 0)

    def test_streak_window_from_goal(self) -> None:
        self.assertEqual(streak_window(2000, 1500, 2200), (1500.0, 2200.0))
        self.assertEqual(streak_window(1800, 1500, 2200), (1350.0, 1980.0))
        self.assertEqual(streak_window(None, 1500, 2200), (1500, 2200))


class TestMacros(unittest.TestCase):
    def test_macro_day_score(self) -> None:
        self.assertEqual(macro_day_score(100, 150, 60), 200)
        self.assertEqual(macro_day_score(100, 200, 40), 130)

    def test_best_macro_day_first_wins_ties(self) -> None:
        days = {
            "2024-01-01": MacroDay(100, 150, 60),
            "2024-01-02": MacroDay(100, 150, 60),
            "2024-01-03": MacroDay(50, 150, 60),
        }
        self.assertEqual(best_macro_day(days), ("2024-01-01", 200))
        self.assertIsNone(best_macro_day({}))

    def test_best_macro_day_handles_negative_scores(self) -> None:
        days = {"2024-01-01": MacroDay(0, 400, 200), "2024-01-02": MacroDay(0, 300, 100)}
        self.assertEqual(best_macro_day(days), ("2024-01-02", -190))

    def test_macro_ratio(self) -> None:
        self.assertEqual(macro_ratio(50, 100, 50), {"protein": 25, "carbs": 50, "fat": 25})
        self.assertEqual(macro_ratio(0, 0, 0), {"protein": 0, "carbs": 0, "fat": 0})

    def test_consistency_perfect_match(self) -> None:
        target = MacroDay(150, 200, 65)
        self.assertEqual(macro_consistency_score([MacroDay(150, 200, 65), MacroDay(75, 100, 32.5)], target), 100.0)

    def test_consistency_scores_each_day_and_averages(self) -> None:
        # Target split 25/25/50 percent of energy (p=4, c=4, f=9 kcal/g).
        target = MacroDay(100, 100, 800 / 9)
        # All-protein day: |100-25| + |0-25| + |0-50| = 150 -> floored at 0.
        # Exact split day: 100.
        days = [MacroDay(100, 0, 0), MacroDay(50, 50, 400 / 9)]
        self.assertEqual(macro_consistency_score(days, target), 50.0)

    def test_consistency_ignores_empty_days(self) -> None:
        target = MacroDay(150, 200, 65)
        self.assertEqual(macro_consistency_score([MacroDay(), MacroDay()], target), 0.0)
        self.assertEqual(macro_consistency_score([], target), 0.0)

    def test_pure_functions_are_deterministic(self) -> None:
        days = [MacroDay(120, 180, 70), MacroDay(90, 250, 40)]
        target = MacroDay(150, 200, 65)
        self.assertEqual(macro_consistency_score(days, target), macro_consistency_score(days, target))


class TestDailyTotals(unittest.TestCase):
    def test_groups_by_date_and_sorts(self) -> None:
        meals = [
            {"eaten_at": "2024-03-02T19:00:00Z", "calories": 700, "protein_g": 40, "carbs_g": 60, "fat_g": 20},
            {"eaten_at": "2024-03-01T08:00:00Z", "calories": 400, "protein_g": 20, "carbs_g": 50, "fat_g": 10},
            {"eaten_at": "2024-03-02T12:00:00Z", "calories": 600, "protein_g": 30, "carbs_g": 70, "fat_g": 15},
        ]
        totals = daily_totals(meals)
        self.assertEqual(list(totals), ["2024-03-01", "2024-03-02"])
        self.assertEqual(totals["2024-03-02"].calories, 1300)
        self.assertEqual(totals["2024-03-02"].meal_count, 2)
        self.assertEqual(totals["2024-03-01"].macros(), MacroDay(20, 50, 10))

    def test_healthiest_day_skips_zero_days(self) -> None:
        by_day = {"Sunday": 0, "Monday": 1800, "Tuesday": 1500, "Wednesday": 1500}
        self.assertEqual(healthiest_day(by_day), "Tuesday")
        self.assertIsNone(healthiest_day({"Sunday": 0}))


if __name__ == "__main__":
    unittest.main()
