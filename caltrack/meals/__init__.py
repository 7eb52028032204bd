# -*- coding: utf-8 -*-
"""Meal logging domain.

Meals are the raw input for the analytics endpoints; every create, update
and delete is mirrored into the activity log.
"""
