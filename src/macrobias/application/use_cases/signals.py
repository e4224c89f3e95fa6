"""Signal outcome evaluation and historical confidence use cases."""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, date, datetime, time, timedelta

import structlog
from pydantic import BaseModel, Field

from macrobias.application.use_cases.base import UseCase
from macrobias.domain.models.calendar import ensure_utc
from macrobias.domain.models.job_results import JobSummary
from macrobias.domain.models.signals import HistoricalConfidence, InsufficientHistory, PastSignal
from macrobias.domain.ports.data_providers import ObservationSource
from macrobias.domain.ports.repositories import SignalRepository
from macrobias.infrastructure.analysis.macro_engine.opportunities import (
    DEFAULT_HORIZON_DAYS,
    MIN_SIGNALS,
    calculate_historical_confidence,
    realized_return,
)
from macrobias.infrastructure.jobs.task_queue import BoundedTaskQueue

logger = structlog.get_logger(__name__)

# Extra history before the oldest signal so its entry close is found across weekends.
ENTRY_LOOKBACK_DAYS = 7


class EvaluateSignalsRequest(BaseModel):
    asof: date | None = Field(default=None, description="Evaluation date; None = today (UTC)")
    horizon_days: int | None = Field(
        default=None, ge=1, description="Calendar days between entry and exit; None = configured"
    )


class EvaluateSignalsResponse(BaseModel):
    evaluated: int = 0
    pending: int = 0
    summary: JobSummary = Field(default_factory=JobSummary)


class EvaluateSignalsUseCase(UseCase[EvaluateSignalsRequest, EvaluateSignalsResponse]):
    """Fill in the realized return of recorded signals whose horizon has elapsed.

    Each signal is scored from the pair's closes: entry at the close of the
    issue date, exit ``horizon_days`` later. Signals whose closes are not
    available yet stay pending and are retried on the next run.
    """

    def __init__(
        self,
        repository: SignalRepository,
        source: ObservationSource,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        task_queue: BoundedTaskQueue | None = None,
    ) -> None:
        self._repository = repository
        self._source = source
        self._horizon_days = horizon_days
        self._task_queue = task_queue or BoundedTaskQueue()

    async def execute(self, request: EvaluateSignalsRequest) -> EvaluateSignalsResponse:
        asof = request.asof or datetime.now(UTC).date()
        horizon = request.horizon_days or self._horizon_days
        cutoff = datetime.combine(asof - timedelta(days=horizon), time.max, tzinfo=UTC)

        by_symbol: dict[str, list[PastSignal]] = defaultdict(list)
        for signal in await self._repository.list_pending(cutoff):
            by_symbol[signal.symbol].append(signal)

        async def _evaluate(symbol: str) -> int:
            signals = by_symbol[symbol]
            start = min(ensure_utc(s.issued_at).date() for s in signals)
            series = await self._source.get_series(
                symbol, start - timedelta(days=ENTRY_LOOKBACK_DAYS), asof
            )
            updated = 0
            for signal in signals:
                outcome = realized_return(signal, series.observations, asof, horizon)
                if outcome is None:
                    continue
                if await self._repository.update_outcome(signal.signal_id, outcome):
                    updated += 1
            return updated

        jobs = await self._task_queue.run(list(by_symbol), _evaluate)

        response = EvaluateSignalsResponse()
        total = sum(len(signals) for signals in by_symbol.values())
        for job in jobs:
            if job.success and job.data is not None:
                response.evaluated += job.data
                response.summary.processed.append(job.symbol)
            else:
                response.summary.skipped[job.symbol] = job.error or "unknown error"
        response.pending = total - response.evaluated
        response.summary.rows_written = response.evaluated

        logger.info(
            "Signal evaluation completed",
            asof=asof.isoformat(),
            horizon_days=horizon,
            evaluated=response.evaluated,
            pending=response.pending,
            skipped=len(response.summary.skipped),
        )
        return response


class HistoricalConfidenceRequest(BaseModel):
    symbols: list[str]
    min_signals: int = Field(default=MIN_SIGNALS, ge=1)


class HistoricalConfidenceResponse(BaseModel):
    results: list[HistoricalConfidence | InsufficientHistory] = Field(default_factory=list)


class HistoricalConfidenceUseCase(
    UseCase[HistoricalConfidenceRequest, HistoricalConfidenceResponse]
):
    def __init__(self, repository: SignalRepository) -> None:
        self._repository = repository

    async def execute(self, request: HistoricalConfidenceRequest) -> HistoricalConfidenceResponse:
        results = [
            await calculate_historical_confidence(symbol.upper(), self._repository, request.min_signals)
            for symbol in request.symbols
        ]
        return HistoricalConfidenceResponse(results=results)
