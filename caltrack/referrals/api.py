# -*- coding: utf-8 -*-
"""Referrals — endpoints for the referring user."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from .models import ReferralCodeResponse, ReferralSummaryResponse, UserCommission
from .storage import list_for_referrer, summary_for_referrer

router = APIRouter(prefix="/api/referrals", tags=["Referrals"])


@router.get("/commissions", response_model=List[UserCommission], summary="Commissions earned by me")
def my_commissions(user: dict = Depends(get_current_user)):
    return list_for_referrer(user["id"])


@router.get("/code", response_model=ReferralCodeResponse, summary="My referral code")
def my_code(user: dict = Depends(get_current_user)):
    return ReferralCodeResponse(referral_code=user["referral_code"])


@router.get("/summary", response_model=ReferralSummaryResponse, summary="Referral totals")
def my_summary(user: dict = Depends(get_current_user)):
    return ReferralSummaryResponse(referral_code=user["referral_code"], **summary_for_referrer(user["id"]))
