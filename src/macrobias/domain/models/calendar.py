"""Economic calendar models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field, field_validator

from macrobias.domain.models.base import ValueObject


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class EventImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CalendarEvent(ValueObject):
    """Scheduled macro release."""

    name: str = Field(..., description="Event name, e.g. CPI YoY")
    country: str = Field(..., description="ISO country or region code, e.g. US, EU")
    currency: str | None = Field(default=None, description="Affected currency, e.g. USD")
    scheduled_at: datetime = Field(
        ..., description="Scheduled release time; naive values are read as UTC"
    )
    impact: EventImpact = EventImpact.MEDIUM

    @field_validator("scheduled_at")
    @classmethod
    def _aware_schedule(cls, value: datetime) -> datetime:
        return ensure_utc(value)
