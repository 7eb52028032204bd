# -*- coding: utf-8 -*-
"""Referrals — admin endpoints (program settings, ledger, payouts)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..activity import record_activity
from ..auth.security import require_admin
from .models import (
    AdminCommissionListResponse,
    Commission,
    CommissionStatus,
    PayoutRequest,
    PayoutResponse,
    ReferralSettings,
    ReferralSettingsUpdate,
)
from .service import (
    CommissionError,
    CommissionNotFound,
    cancel_commission,
    mark_commission_paid,
    process_payouts,
)
from .storage import get_settings, list_with_emails, update_settings

router = APIRouter(prefix="/api/admin/referral", tags=["Admin Referral"], dependencies=[Depends(require_admin)])


def _http_error(exc: CommissionError) -> HTTPException:
    status = 404 if isinstance(exc, CommissionNotFound) else 409
    return HTTPException(status_code=status, detail=str(exc))


@router.get("/settings", response_model=ReferralSettings, summary="Current referral program settings")
def read_settings():
    try:
        return get_settings()
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="Referral settings not found") from exc


@router.put("/settings", response_model=ReferralSettings, summary="Update referral program settings")
def write_settings(request: ReferralSettingsUpdate, admin: dict = Depends(require_admin)):
    updated = update_settings(
        commission_percent=f"{request.commission_percent:.2f}",
        is_recurring=request.is_recurring,
    )
    record_activity(
        admin["id"],
        "referral_settings_updated",
        {"commission_percent": str(request.commission_percent), "is_recurring": request.is_recurring},
    )
    return updated


@router.get("/commissions", response_model=AdminCommissionListResponse, summary="Commission ledger")
def commissions(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    status: Optional[CommissionStatus] = Query(default=None),
):
    return list_with_emails(limit=limit, offset=offset, status=status)


@router.post("/commissions/{commission_id}/pay", response_model=Commission, summary="Mark a commission paid")
def pay(commission_id: int, admin: dict = Depends(require_admin)):
    try:
        commission = mark_commission_paid(commission_id)
    except CommissionError as exc:
        raise _http_error(exc) from exc
    record_activity(admin["id"], "commission_paid", {"commission_id": commission_id})
    return commission


@router.post("/commissions/{commission_id}/cancel", response_model=Commission, summary="Cancel a pending commission")
def cancel(commission_id: int, admin: dict = Depends(require_admin)):
    try:
        commission = cancel_commission(commission_id)
    except CommissionError as exc:
        raise _http_error(exc) from exc
    record_activity(admin["id"], "commission_cancelled", {"commission_id": commission_id})
    return commission


@router.post("/payouts", response_model=PayoutResponse, summary="Pay out eligible pending commissions")
def payouts(request: PayoutRequest, admin: dict = Depends(require_admin)):
    paid = process_payouts(min_amount=request.min_amount, older_than_days=request.older_than_days)
    record_activity(admin["id"], "referral_payout", {"paid_count": len(paid)})
    return PayoutResponse(paid_count=len(paid), commission_ids=paid)
