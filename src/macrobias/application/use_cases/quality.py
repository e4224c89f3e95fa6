"""Quality check use case."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog
from pydantic import BaseModel, Field

from macrobias.application.use_cases.base import UseCase
from macrobias.application.use_cases.board import (
    BuildTacticalBoardRequest,
    BuildTacticalBoardUseCase,
)
from macrobias.domain.models.correlation import CorrelationWindow
from macrobias.domain.models.quality import (
    AssetSnapshot,
    IndicatorReading,
    QualityReport,
    QualitySnapshot,
    SeriesFreshness,
)
from macrobias.domain.ports.data_providers import CalendarSource, MacroFactorSource
from macrobias.infrastructure.analysis.macro_engine.invariants import run_quality_checks

logger = structlog.get_logger(__name__)

UPCOMING_HORIZON = timedelta(days=7)


class RunQualityChecksRequest(BaseModel):
    symbols: list[str] | None = None
    now: datetime | None = None
    series: list[SeriesFreshness] = Field(
        default_factory=list, description="Last observation dates of monitored indicator series"
    )
    readings: list[IndicatorReading] = Field(default_factory=list)


class RunQualityChecksResponse(BaseModel):
    report: QualityReport
    snapshot: QualitySnapshot


class RunQualityChecksUseCase(UseCase[RunQualityChecksRequest, RunQualityChecksResponse]):
    """Build the current board and run every invariant over it.

    The check is read-only: nothing it finds changes stored outputs.
    """

    def __init__(
        self,
        board_use_case: BuildTacticalBoardUseCase,
        calendar_source: CalendarSource,
        factor_source: MacroFactorSource | None = None,
    ) -> None:
        self._board = board_use_case
        self._calendar = calendar_source
        self._factors = factor_source

    async def execute(self, request: RunQualityChecksRequest) -> RunQualityChecksResponse:
        now = request.now or datetime.now(UTC)
        board = await self._board.execute(
            BuildTacticalBoardRequest(symbols=request.symbols, now=now)
        )
        rows = {row.pair: row for row in board.rows}
        correlations_12m = {
            c.symbol: c for c in board.correlations if c.window == CorrelationWindow.M12
        }
        events = await self._calendar.get_upcoming_events(now, now + UPCOMING_HORIZON)

        readings = list(request.readings)
        if self._factors is not None:
            readings.extend(await self._factors.get_indicator_readings())
        readings.extend(
            IndicatorReading(key=f"corr_{c.symbol}_{c.window.value}", value=c.value, unit="correlation")
            for c in board.correlations
        )

        snapshot = QualitySnapshot(
            now=now,
            usd_regime=board.usd_regime,
            assets=[
                AssetSnapshot(
                    asset=a.asset,
                    bias=a.bias,
                    narrative=a.narrative,
                    row=rows.get(a.asset.symbol),
                    correlation_12m=correlations_12m.get(a.asset.symbol),
                )
                for a in board.analyses
            ],
            correlations=board.correlations,
            series=request.series,
            readings=readings,
            upcoming_events=events,
        )
        report = run_quality_checks(snapshot)
        if not report.ok:
            logger.warning("Quality checks failed", failed=report.failed, warned=report.warned)
        return RunQualityChecksResponse(report=report, snapshot=snapshot)
