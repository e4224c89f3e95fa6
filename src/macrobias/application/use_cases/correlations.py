"""Correlation refresh and lookup use cases."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta

import structlog
from pydantic import BaseModel, Field

from macrobias.application.use_cases.base import UseCase
from macrobias.domain.exceptions import ComputeError
from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.correlation import (
    CorrelationOutcome,
    CorrelationResult,
    CorrelationWindow,
)
from macrobias.domain.models.job_results import JobSummary
from macrobias.domain.models.observation import AlignedPair, ObservationSeries
from macrobias.domain.ports.data_providers import ObservationSource
from macrobias.domain.ports.repositories import CorrelationRepository
from macrobias.infrastructure.analysis.macro_engine.correlation import (
    DEFAULT_MAX_FILL_DAYS,
    DEFAULT_MAX_STALENESS_DAYS,
    align_series,
    aligned_pairs,
    calculate_correlation,
    compute_correlation_windows,
)
from macrobias.infrastructure.jobs.task_queue import BoundedTaskQueue
from macrobias.infrastructure.weights import AssetUniverse

logger = structlog.get_logger(__name__)


class RefreshCorrelationsRequest(BaseModel):
    """Request to recompute and persist correlations."""

    symbols: list[str] | None = Field(default=None, description="Subset of the universe; None = all")
    asof: date | None = Field(default=None, description="Evaluation date; None = today (UTC)")
    windows: list[CorrelationWindow] = Field(default_factory=lambda: list(CorrelationWindow))


class RefreshCorrelationsResponse(BaseModel):
    results: list[CorrelationResult] = Field(default_factory=list)
    summary: JobSummary = Field(default_factory=JobSummary)


class RefreshCorrelationsUseCase(UseCase[RefreshCorrelationsRequest, RefreshCorrelationsResponse]):
    """Fetch series, compute every window per asset and upsert the rows.

    A failing asset is logged and skipped; the rest of the universe is still
    processed and persisted.
    """

    def __init__(
        self,
        source: ObservationSource,
        repository: CorrelationRepository,
        universe: AssetUniverse,
        benchmark: str = "DXY",
        history_days: int = 1100,
        max_fill_days: int = DEFAULT_MAX_FILL_DAYS,
        max_staleness_days: int = DEFAULT_MAX_STALENESS_DAYS,
        task_queue: BoundedTaskQueue | None = None,
    ) -> None:
        self._source = source
        self._repository = repository
        self._universe = universe
        self._benchmark = benchmark
        self._history_days = history_days
        self._max_fill_days = max_fill_days
        self._max_staleness_days = max_staleness_days
        self._task_queue = task_queue or BoundedTaskQueue()

    def _select(self, symbols: Sequence[str] | None) -> list[AssetMeta]:
        if not symbols:
            return list(self._universe.assets)
        selected: list[AssetMeta] = []
        for symbol in symbols:
            asset = self._universe.get(symbol)
            if asset is None:
                logger.warning("Symbol not in universe", symbol=symbol)
                continue
            selected.append(asset)
        return selected

    async def execute(self, request: RefreshCorrelationsRequest) -> RefreshCorrelationsResponse:
        asof = request.asof or datetime.now(UTC).date()
        start = asof - timedelta(days=self._history_days)
        assets = self._select(request.symbols)
        benchmark_series = await self._source.get_series(self._benchmark, start, asof)

        async def _process(symbol: str) -> list[CorrelationResult]:
            asset_series: ObservationSeries = await self._source.get_series(symbol, start, asof)
            try:
                results = compute_correlation_windows(
                    symbol,
                    self._benchmark,
                    asset_series.observations,
                    benchmark_series.observations,
                    windows=request.windows,
                    asof=asof,
                    max_fill_days=self._max_fill_days,
                    max_staleness_days=self._max_staleness_days,
                )
            except (ValueError, KeyError, TypeError) as e:
                raise ComputeError(symbol, str(e)) from e
            for result in results:
                await self._repository.upsert(result)
            return results

        job_results = await self._task_queue.run([a.symbol for a in assets], _process)

        response = RefreshCorrelationsResponse()
        for job in job_results:
            if job.success and job.data is not None:
                response.results.extend(job.data)
                response.summary.processed.append(job.symbol)
                response.summary.rows_written += len(job.data)
            else:
                response.summary.skipped[job.symbol] = job.error or "unknown error"

        logger.info(
            "Correlation refresh completed",
            asof=asof.isoformat(),
            benchmark=self._benchmark,
            processed=len(response.summary.processed),
            skipped=len(response.summary.skipped),
            rows=response.summary.rows_written,
        )
        return response


class GetLatestCorrelationsRequest(BaseModel):
    symbols: list[str]
    windows: list[CorrelationWindow] = Field(
        default_factory=lambda: [CorrelationWindow.M12, CorrelationWindow.M3]
    )
    asof: date | None = Field(
        default=None, description="Rows computed on this date instead of the most recent ones"
    )


class GetLatestCorrelationsResponse(BaseModel):
    results: list[CorrelationResult] = Field(default_factory=list)


class GetLatestCorrelationsUseCase(
    UseCase[GetLatestCorrelationsRequest, GetLatestCorrelationsResponse]
):
    """Read stored rows per symbol and window: the most recent, or those of one date."""

    def __init__(self, repository: CorrelationRepository, benchmark: str = "DXY") -> None:
        self._repository = repository
        self._benchmark = benchmark

    async def execute(self, request: GetLatestCorrelationsRequest) -> GetLatestCorrelationsResponse:
        if request.asof is not None:
            wanted = {s.upper() for s in request.symbols}
            rows = await self._repository.list_for_date(request.asof)
            return GetLatestCorrelationsResponse(
                results=[
                    r
                    for r in rows
                    if r.symbol in wanted
                    and r.benchmark == self._benchmark
                    and r.window in request.windows
                ]
            )

        results: list[CorrelationResult] = []
        for symbol in request.symbols:
            for window in request.windows:
                row = await self._repository.latest(symbol.upper(), self._benchmark, window)
                if row is not None:
                    results.append(row)
        return GetLatestCorrelationsResponse(results=results)


class InspectAlignmentRequest(BaseModel):
    symbol: str
    window: CorrelationWindow = CorrelationWindow.M12
    asof: date | None = Field(default=None, description="Evaluation date; None = today (UTC)")
    tail: int = Field(default=10, ge=1, description="Number of most recent aligned samples to return")


class InspectAlignmentResponse(BaseModel):
    symbol: str
    benchmark: str
    window: CorrelationWindow
    asset_points: int
    benchmark_points: int
    aligned_points: int
    samples: list[AlignedPair] = Field(default_factory=list)
    outcome: CorrelationOutcome


class InspectAlignmentUseCase(UseCase[InspectAlignmentRequest, InspectAlignmentResponse]):
    """Show how an asset lines up with the benchmark before correlating.

    Nothing is stored. Useful when a window comes back as no_overlap or
    stale and the raw series need a look.
    """

    def __init__(
        self,
        source: ObservationSource,
        benchmark: str = "DXY",
        history_days: int = 1100,
        max_fill_days: int = DEFAULT_MAX_FILL_DAYS,
        max_staleness_days: int = DEFAULT_MAX_STALENESS_DAYS,
    ) -> None:
        self._source = source
        self._benchmark = benchmark
        self._history_days = history_days
        self._max_fill_days = max_fill_days
        self._max_staleness_days = max_staleness_days

    async def execute(self, request: InspectAlignmentRequest) -> InspectAlignmentResponse:
        symbol = request.symbol.upper()
        asof = request.asof or datetime.now(UTC).date()
        start = asof - timedelta(days=self._history_days)
        asset_series = await self._source.get_series(symbol, start, asof)
        benchmark_series = await self._source.get_series(self._benchmark, start, asof)

        frame = align_series(
            asset_series.observations,
            benchmark_series.observations,
            max_fill_days=self._max_fill_days,
        )
        outcome = calculate_correlation(
            asset_series.observations,
            benchmark_series.observations,
            request.window.size,
            request.window.min_obs,
            asof=asof,
            max_fill_days=self._max_fill_days,
            max_staleness_days=self._max_staleness_days,
        )
        logger.debug(
            "Alignment inspected",
            symbol=symbol,
            aligned=len(frame),
            outcome=outcome.kind,
        )
        return InspectAlignmentResponse(
            symbol=symbol,
            benchmark=self._benchmark,
            window=request.window,
            asset_points=len(asset_series.observations),
            benchmark_points=len(benchmark_series.observations),
            aligned_points=len(frame),
            samples=aligned_pairs(frame.tail(request.tail)),
            outcome=outcome,
        )
