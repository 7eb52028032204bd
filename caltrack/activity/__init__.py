# -*- coding: utf-8 -*-
"""Activity logger: who did what, for the admin dashboard."""

from .storage import record_activity

__all__ = ["record_activity"]
