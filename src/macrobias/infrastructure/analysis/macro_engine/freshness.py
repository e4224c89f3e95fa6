"""Freshness SLAs by publication frequency."""

from __future__ import annotations

import math
from datetime import date
from typing import Literal

import numpy as np

from macrobias.domain.models.base import ValueObject
from macrobias.domain.models.observation import Frequency


class FreshnessSla(ValueObject):
    max_age: int
    unit: Literal["business", "calendar"]


FRESHNESS_SLA: dict[Frequency, FreshnessSla] = {
    Frequency.DAILY: FreshnessSla(max_age=3, unit="business"),
    Frequency.WEEKLY: FreshnessSla(max_age=10, unit="calendar"),
    Frequency.MONTHLY: FreshnessSla(max_age=60, unit="calendar"),
    Frequency.QUARTERLY: FreshnessSla(max_age=150, unit="calendar"),
}

INDICATOR_FREQUENCIES: dict[str, Frequency] = {
    "t10y2y": Frequency.DAILY,
    "vix": Frequency.DAILY,
    "dxy": Frequency.DAILY,
    "dtwexbgs": Frequency.DAILY,
    "claims_4w": Frequency.WEEKLY,
    "icsa": Frequency.WEEKLY,
    "cpi_yoy": Frequency.MONTHLY,
    "corecpi_yoy": Frequency.MONTHLY,
    "pce_yoy": Frequency.MONTHLY,
    "corepce_yoy": Frequency.MONTHLY,
    "ppi_yoy": Frequency.MONTHLY,
    "unrate": Frequency.MONTHLY,
    "payems_delta": Frequency.MONTHLY,
    "indpro_yoy": Frequency.MONTHLY,
    "retail_yoy": Frequency.MONTHLY,
    "fedfunds": Frequency.MONTHLY,
    "gdp_yoy": Frequency.QUARTERLY,
    "gdp_qoq": Frequency.QUARTERLY,
}


class FreshnessStatus(ValueObject):
    stale: bool
    age: float
    max_age: int
    unit: Literal["business", "calendar"]


def frequency_for(indicator_key: str) -> Frequency:
    """Known frequency of an indicator; unknown indicators are treated as monthly."""
    return INDICATOR_FREQUENCIES.get(indicator_key.lower(), Frequency.MONTHLY)


def business_days_between(start: date, end: date) -> int:
    """Weekdays elapsed from ``start`` to ``end`` (Mon -> Wed is 2)."""
    if end <= start:
        return 0
    return int(np.busday_count(start, end))


def check_freshness(last_date: date | None, frequency: Frequency, today: date) -> FreshnessStatus:
    """Compare a series' last observation date with its frequency SLA.

    A series with no date at all is stale with infinite age.
    """
    sla = FRESHNESS_SLA[frequency]
    if last_date is None:
        return FreshnessStatus(stale=True, age=math.inf, max_age=sla.max_age, unit=sla.unit)
    if sla.unit == "business":
        age = business_days_between(last_date, today)
    else:
        age = max(0, (today - last_date).days)
    return FreshnessStatus(stale=age > sla.max_age, age=age, max_age=sla.max_age, unit=sla.unit)


def is_stale(last_date: date | None, frequency: Frequency, today: date) -> bool:
    return check_freshness(last_date, frequency, today).stale


def normalize_period_date(value: date, frequency: Frequency) -> date:
    """Canonical date of the period containing ``value``.

    Monthly dates map to the first of the month and quarterly dates to the first
    day of the quarter, so releases stamped on different days compare equal.
    """
    if frequency == Frequency.MONTHLY:
        return value.replace(day=1)
    if frequency == Frequency.QUARTERLY:
        first_month = 3 * ((value.month - 1) // 3) + 1
        return value.replace(month=first_month, day=1)
    return value
