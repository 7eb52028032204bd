# -*- coding: utf-8 -*-
"""Calorie tracker backend: meals, goals, analytics, referrals and admin tools."""

__version__ = "0.1.0"
