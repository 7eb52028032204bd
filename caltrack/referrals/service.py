# -*- coding: utf-8 -*-
"""
Referral commission rules.

Subscription events turn into commission ledger rows here. The ledger is
append-only: rows move pending -> paid or pending -> cancelled and are never
deleted (the schema enforces both the paid_at rule and the no-delete rule).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..app_db import iso_utc
from ..auth.storage import get_user_by_id
from . import storage
from .models import CommissionStatus
from .money import commission_amount, to_cents

logger = logging.getLogger(__name__)


class CommissionError(Exception):
    """Base class for commission rule violations."""


class CommissionNotFound(CommissionError):
    pass


class CommissionStateError(CommissionError):
    pass


def renewal_event_id(subscription: Dict[str, Any]) -> str:
    return f"{subscription['id']}:renewal:{subscription.get('renewed_at') or ''}"


def record_subscription_event(subscription: Dict[str, Any], renewal: bool = False) -> Optional[Dict[str, Any]]:
    """
    Credit the subscriber's referrer for a paid subscription event.

    Args:
        subscription: subscription row (`id`, `user_id`, `amount`, `renewed_at`)
        renewal: True for a renewal of an existing subscription

    Returns:
        The commission row, or None when the event earns nothing.
    """
    referee = get_user_by_id(subscription["user_id"])
    if not referee:
        return None
    referrer_id = referee.get("referred_by")
    if not referrer_id or referrer_id == referee["id"]:
        return None

    event_id = renewal_event_id(subscription) if renewal else str(subscription["id"])
    existing = storage.find_commission(event_id, referee["id"])
    if existing:
        return existing

    program = storage.get_settings()
    recurring = bool(program["is_recurring"])
    if renewal and not recurring:
        return None
    if not recurring and storage.referee_has_commission(referee["id"]):
        # One-time programs pay once per referred user.
        return None

    amount = commission_amount(subscription["amount"], program["commission_percent"])
    if amount <= Decimal("0"):
        return None

    commission = storage.insert_commission(
        referrer_id=referrer_id,
        referee_id=referee["id"],
        subscription_id=event_id,
        amount_cents=to_cents(amount),
        is_recurring=renewal,
    )
    logger.info(
        "Referral commission %s: referrer=%s referee=%s amount=%s",
        commission["id"],
        referrer_id,
        referee["id"],
        commission["amount"],
    )
    return commission


def _transition(commission_id: int, to_status: CommissionStatus) -> Dict[str, Any]:
    current = storage.get_commission(commission_id)
    if not current:
        raise CommissionNotFound(f"Commission {commission_id} not found")
    if current["status"] != CommissionStatus.pending.value:
        raise CommissionStateError(
            f"Commission {commission_id} is {current['status']}, only pending commissions can be {to_status.value}"
        )
    if not storage.transition_status(commission_id, from_status=CommissionStatus.pending, to_status=to_status):
        raise CommissionStateError(f"Commission {commission_id} changed concurrently")
    return storage.get_commission(commission_id) or current


def mark_commission_paid(commission_id: int) -> Dict[str, Any]:
    return _transition(commission_id, CommissionStatus.paid)


def cancel_commission(commission_id: int) -> Dict[str, Any]:
    return _transition(commission_id, CommissionStatus.cancelled)


def process_payouts(min_amount: Decimal = Decimal("0"), older_than_days: int = 0) -> List[int]:
    """
    Mark every eligible pending commission as paid.

    Args:
        min_amount: skip commissions below this amount
        older_than_days: only pay commissions created at least this many days ago

    Returns:
        Ids of the commissions paid by this run.
    """
    cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
    created_before = iso_utc(cutoff)
    paid: List[int] = []
    for commission_id in storage.pending_for_payout(
        min_amount_cents=to_cents(min_amount), created_before=created_before
    ):
        if storage.transition_status(
            commission_id, from_status=CommissionStatus.pending, to_status=CommissionStatus.paid
        ):
            paid.append(commission_id)
    logger.info("Referral payout run: %d commission(s) paid", len(paid))
    return paid
