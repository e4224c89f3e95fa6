"""Unit tests for freshness SLAs."""

from __future__ import annotations

import math
from datetime import date

import pytest
from pydantic import ValidationError

from macrobias.domain.models.observation import Frequency
from macrobias.infrastructure.analysis.macro_engine.freshness import (
    business_days_between,
    check_freshness,
    frequency_for,
    is_stale,
    normalize_period_date,
)


@pytest.mark.unit
class TestFreshness:
    def test_business_days_between(self) -> None:
        assert business_days_between(date(2025, 6, 2), date(2025, 6, 4)) == 2
        # Friday to Monday is one business day.
        assert business_days_between(date(2025, 6, 6), date(2025, 6, 9)) == 1
        assert business_days_between(date(2025, 6, 9), date(2025, 6, 6)) == 0

    def test_daily_sla_counts_business_days(self) -> None:
        friday = date(2025, 6, 6)
        assert not is_stale(friday, Frequency.DAILY, date(2025, 6, 11))
        status = check_freshness(friday, Frequency.DAILY, date(2025, 6, 12))
        assert status.stale
        assert status.age == 4
        assert status.unit == "business"

    @pytest.mark.parametrize(
        ("frequency", "fresh_days", "stale_days"),
        [
            (Frequency.WEEKLY, 10, 11),
            (Frequency.MONTHLY, 60, 61),
            (Frequency.QUARTERLY, 150, 151),
        ],
    )
    def test_calendar_slas(self, frequency: Frequency, fresh_days: int, stale_days: int) -> None:
        today = date(2025, 12, 31)
        assert not is_stale(date.fromordinal(today.toordinal() - fresh_days), frequency, today)
        assert is_stale(date.fromordinal(today.toordinal() - stale_days), frequency, today)

    def test_missing_date_is_stale(self) -> None:
        status = check_freshness(None, Frequency.MONTHLY, date(2025, 6, 1))
        assert status.stale
        assert math.isinf(status.age)

    def test_status_is_immutable(self) -> None:
        status = check_freshness(date(2025, 6, 6), Frequency.DAILY, date(2025, 6, 9))

        with pytest.raises(ValidationError):
            status.stale = True  # type: ignore[misc]
        assert status == check_freshness(date(2025, 6, 6), Frequency.DAILY, date(2025, 6, 9))

    def test_frequency_lookup(self) -> None:
        assert frequency_for("VIX") == Frequency.DAILY
        assert frequency_for("claims_4w") == Frequency.WEEKLY
        assert frequency_for("gdp_qoq") == Frequency.QUARTERLY
        assert frequency_for("unknown_series") == Frequency.MONTHLY

    def test_normalize_period_date(self) -> None:
        assert normalize_period_date(date(2025, 5, 17), Frequency.MONTHLY) == date(2025, 5, 1)
        assert normalize_period_date(date(2025, 8, 30), Frequency.QUARTERLY) == date(2025, 7, 1)
        assert normalize_period_date(date(2025, 8, 30), Frequency.DAILY) == date(2025, 8, 30)
