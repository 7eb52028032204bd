# -*- coding: utf-8 -*-
"""Referrals — models."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CommissionStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    cancelled = "cancelled"


class ReferralSettings(BaseModel):
    id: int
    commission_percent: Decimal
    is_recurring: bool
    created_at: str
    updated_at: str


class ReferralSettingsUpdate(BaseModel):
    commission_percent: Decimal = Field(..., ge=0, le=100, decimal_places=2)
    is_recurring: bool


class Commission(BaseModel):
    id: int
    referrer_id: str
    referee_id: str
    subscription_id: str
    amount: Decimal
    # Open set; CommissionStatus lists the values this service transitions between.
    status: str
    is_recurring: bool
    created_at: str
    paid_at: Optional[str] = None


class AdminCommission(Commission):
    referrer_email: Optional[str] = None
    referee_email: Optional[str] = None


class AdminCommissionListResponse(BaseModel):
    total: int
    commissions: List[AdminCommission]


class UserCommission(BaseModel):
    id: int
    amount: Decimal
    # Open set; CommissionStatus lists the values this service transitions between.
    status: str
    is_recurring: bool
    created_at: str
    paid_at: Optional[str] = None


class ReferralCodeResponse(BaseModel):
    referral_code: str


class ReferralSummaryResponse(BaseModel):
    referral_code: str
    referral_count: int = 0
    pending_total: Decimal = Decimal("0.00")
    paid_total: Decimal = Decimal("0.00")
    commission_count: int = 0


class PayoutRequest(BaseModel):
    min_amount: Decimal = Field(Decimal("0.00"), ge=0)
    older_than_days: int = Field(0, ge=0, le=3650)


class PayoutResponse(BaseModel):
    paid_count: int
    commission_ids: List[int]
