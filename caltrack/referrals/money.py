# -*- coding: utf-8 -*-
"""Money helpers: amounts are Decimal at the edges and integer cents in SQLite."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Q = Decimal("0.01")

Number = Union[Decimal, int, float, str, None]


def money(value: Number) -> Decimal:
    return Decimal(str(value or 0)).quantize(Q, rounding=ROUND_HALF_UP)


def to_cents(value: Number) -> int:
    return int(money(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(Q, rounding=ROUND_HALF_UP)


def commission_amount(amount: Number, percent: Number) -> Decimal:
    """`amount * percent / 100`, rounded half-up to the cent."""
    return (money(amount) * Decimal(str(percent or 0)) / Decimal(100)).quantize(Q, rounding=ROUND_HALF_UP)
