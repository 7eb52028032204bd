# -*- coding: utf-8 -*-
"""Subscriptions — models."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class SubscriptionCreateRequest(BaseModel):
    plan: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class Subscription(BaseModel):
    id: str
    user_id: str
    plan: str
    amount: Decimal
    status: str = "active"
    created_at: str
    renewed_at: Optional[str] = None
    cancelled_at: Optional[str] = None


class SubscriptionEventResponse(BaseModel):
    subscription: Subscription
    commission_id: Optional[int] = None


class SubscriptionListResponse(BaseModel):
    count: int
    subscriptions: List[Subscription]
