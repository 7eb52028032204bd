"""Derived nutrition analytics (streaks, macro balance, weekly stats)."""
