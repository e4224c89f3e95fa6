"""File-backed macro factor and calendar sources.

Factor snapshots and calendars are produced by external ingestion jobs; these
sources read the JSON files they publish.

Factor file::

    {"default": {...}, "assets": {"EURUSD": {"risk_regime": 0.3, ...}},
     "indicators": {"cpi_yoy": {"value": 3.1, "previous": 3.4}}}

Calendar file::

    {"events": [{"name": "CPI YoY", "country": "US", "scheduled_at": "...", "impact": "high"}]}
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from macrobias.domain.exceptions import DataSourceError
from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import BiasInputs
from macrobias.domain.models.calendar import CalendarEvent, ensure_utc
from macrobias.domain.models.quality import IndicatorReading
from macrobias.domain.ports.data_providers import CalendarSource, MacroFactorSource

logger = structlog.get_logger(__name__)


def _load(path: Path, source: str) -> dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DataSourceError(source, f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise DataSourceError(source, f"{path} must contain a JSON object")
    return data


class JsonMacroFactorSource(MacroFactorSource):
    """Per-asset factor snapshots with an optional ``default`` entry."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._snapshots: dict[str, BiasInputs] | None = None
        self._default = BiasInputs()
        self._readings: list[IndicatorReading] = []

    def get_provider_name(self) -> str:
        return "json_factors"

    def _ensure_loaded(self) -> dict[str, BiasInputs]:
        if self._snapshots is None:
            raw = _load(self._path, self.get_provider_name())
            try:
                self._default = BiasInputs.model_validate(raw.get("default") or {})
                self._snapshots = {
                    symbol.upper(): BiasInputs.model_validate(values)
                    for symbol, values in (raw.get("assets") or {}).items()
                }
                self._readings = [
                    IndicatorReading.model_validate({**values, "key": key})
                    for key, values in (raw.get("indicators") or {}).items()
                ]
            except ValidationError as e:
                raise DataSourceError(self.get_provider_name(), f"invalid factor snapshot: {e}") from e
            logger.debug("Loaded factor snapshots", path=str(self._path), assets=len(self._snapshots))
        return self._snapshots

    async def get_inputs(self, asset: AssetMeta) -> BiasInputs:
        return self._ensure_loaded().get(asset.symbol.upper(), self._default)

    async def get_indicator_readings(self) -> list[IndicatorReading]:
        self._ensure_loaded()
        return list(self._readings)


class JsonCalendarSource(CalendarSource):
    """Calendar file source; without a path there are no scheduled events."""

    def __init__(self, path: Path | None) -> None:
        self._path = path

    def get_provider_name(self) -> str:
        return "json_calendar"

    async def get_upcoming_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        if self._path is None:
            return []
        start, end = ensure_utc(start), ensure_utc(end)
        raw = _load(self._path, self.get_provider_name())
        try:
            events = [CalendarEvent.model_validate(item) for item in raw.get("events", [])]
        except ValidationError as e:
            raise DataSourceError(self.get_provider_name(), f"invalid calendar: {e}") from e
        return sorted(
            (e for e in events if start <= e.scheduled_at <= end),
            key=lambda e: e.scheduled_at,
        )
