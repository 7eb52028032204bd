# -*- coding: utf-8 -*-
"""Subscriptions — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..activity import record_activity
from ..auth.security import get_current_user, require_admin
from ..referrals.service import record_subscription_event
from .models import (
    Subscription,
    SubscriptionCreateRequest,
    SubscriptionEventResponse,
    SubscriptionListResponse,
)
from .storage import cancel_subscription, create_subscription, get_subscription, list_subscriptions, mark_renewed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])
admin_router = APIRouter(
    prefix="/api/admin/subscriptions", tags=["Admin Subscriptions"], dependencies=[Depends(require_admin)]
)


@router.post("", response_model=SubscriptionEventResponse, status_code=201, summary="Record a paid subscription")
def subscribe(request: SubscriptionCreateRequest, user: dict = Depends(get_current_user)):
    try:
        subscription = create_subscription(user["id"], plan=request.plan, amount=request.amount)
    except Exception as exc:
        logger.exception("Failed to save subscription for user %s", user["id"])
        raise HTTPException(status_code=500, detail=f"Failed to save subscription: {exc}") from exc

    commission = record_subscription_event(subscription)
    record_activity(user["id"], "subscription_created", {"plan": request.plan, "amount": str(request.amount)})
    return SubscriptionEventResponse(
        subscription=Subscription(**subscription),
        commission_id=commission["id"] if commission else None,
    )


@router.post("/{subscription_id}/renew", response_model=SubscriptionEventResponse, summary="Record a renewal")
def renew(subscription_id: str, user: dict = Depends(get_current_user)):
    current = get_subscription(subscription_id, user_id=user["id"])
    if not current:
        raise HTTPException(status_code=404, detail="Subscription not found")
    if current["status"] != "active":
        raise HTTPException(status_code=409, detail=f"Subscription is {current['status']}")
    subscription = mark_renewed(subscription_id)
    commission = record_subscription_event(subscription, renewal=True)
    record_activity(user["id"], "subscription_renewed", {"subscription_id": subscription_id})
    return SubscriptionEventResponse(
        subscription=Subscription(**subscription),
        commission_id=commission["id"] if commission else None,
    )


@router.get("", response_model=SubscriptionListResponse, summary="List my subscriptions")
def list_mine(user: dict = Depends(get_current_user)):
    subscriptions = list_subscriptions(user["id"])
    return SubscriptionListResponse(count=len(subscriptions), subscriptions=subscriptions)


def _cancel(subscription_id: str, actor_id: str) -> Subscription:
    subscription = cancel_subscription(subscription_id)
    if subscription is None:
        raise HTTPException(status_code=409, detail="Only active subscriptions can be cancelled")
    record_activity(actor_id, "subscription_cancelled", {"subscription_id": subscription_id})
    return Subscription(**subscription)


@router.post("/{subscription_id}/cancel", response_model=Subscription, summary="Cancel my subscription")
def cancel(subscription_id: str, user: dict = Depends(get_current_user)):
    if not get_subscription(subscription_id, user_id=user["id"]):
        raise HTTPException(status_code=404, detail="Subscription not found")
    return _cancel(subscription_id, user["id"])


@admin_router.post("/{subscription_id}/cancel", response_model=Subscription, summary="Cancel any subscription")
def admin_cancel(subscription_id: str, admin: dict = Depends(require_admin)):
    if not get_subscription(subscription_id):
        raise HTTPException(status_code=404, detail="Subscription not found")
    return _cancel(subscription_id, admin["id"])
