"""Tactical board use case: bias, narrative and action per asset."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError

from macrobias.application.use_cases.base import UseCase
from macrobias.domain.exceptions import ComputeError
from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import BiasInputs, ExpandedNarrative, MacroBias, RiskLabel
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.job_results import JobSummary
from macrobias.domain.models.signals import PastSignal
from macrobias.domain.models.tactical import (
    NarrativeOutput,
    TacticalAction,
    TacticalRow,
    UsdRegime,
)
from macrobias.domain.ports.data_providers import MacroFactorSource
from macrobias.domain.ports.repositories import CorrelationRepository, SignalRepository
from macrobias.infrastructure.analysis.macro_engine.bias import compute_bias
from macrobias.infrastructure.analysis.macro_engine.narrative import (
    build_expanded_narrative,
    build_narrative,
)
from macrobias.infrastructure.analysis.macro_engine.tactical import (
    build_tactical_board,
    usd_regime_from_bias,
)
from macrobias.infrastructure.jobs.task_queue import BoundedTaskQueue
from macrobias.infrastructure.weights import AssetUniverse, WeightConfig

logger = structlog.get_logger(__name__)


class AssetAnalysis(BaseModel):
    """Bias and narrative computed for one asset."""

    asset: AssetMeta
    inputs: BiasInputs
    bias: MacroBias
    narrative: NarrativeOutput
    expanded: ExpandedNarrative


class BuildTacticalBoardRequest(BaseModel):
    symbols: list[str] | None = Field(default=None, description="Subset of the universe; None = all")
    now: datetime | None = Field(default=None, description="Reference time; None = now (UTC)")
    record_signals: bool = Field(
        default=False, description="Persist directional rows as signals for later scoring"
    )


class BuildTacticalBoardResponse(BaseModel):
    rows: list[TacticalRow] = Field(default_factory=list)
    analyses: list[AssetAnalysis] = Field(default_factory=list)
    correlations: list[CorrelationResult] = Field(default_factory=list)
    usd_regime: UsdRegime = UsdRegime.NEUTRAL
    risk_label: RiskLabel | None = None
    summary: JobSummary = Field(default_factory=JobSummary)

    def analysis(self, symbol: str) -> AssetAnalysis | None:
        return next((a for a in self.analyses if a.asset.symbol == symbol), None)


def resolve_usd_regime(inputs: Sequence[BiasInputs]) -> UsdRegime:
    """USD regime from the median usd_bias reading across assets."""
    readings = [i.usd_bias for i in inputs if i.usd_bias is not None]
    if not readings:
        return UsdRegime.NEUTRAL
    return usd_regime_from_bias(float(np.median(readings)))


def resolve_risk_label(inputs: Sequence[BiasInputs]) -> RiskLabel | None:
    labels = [label for i in inputs if (label := i.resolved_risk_label()) is not None]
    if not labels:
        return None
    return max(set(labels), key=labels.count)


class BuildTacticalBoardUseCase(UseCase[BuildTacticalBoardRequest, BuildTacticalBoardResponse]):
    """Compute biases and narratives, then fuse them with stored correlations."""

    def __init__(
        self,
        factor_source: MacroFactorSource,
        correlation_repository: CorrelationRepository,
        universe: AssetUniverse,
        weights: WeightConfig,
        benchmark: str = "DXY",
        signal_repository: SignalRepository | None = None,
        task_queue: BoundedTaskQueue | None = None,
    ) -> None:
        self._factor_source = factor_source
        self._correlations = correlation_repository
        self._universe = universe
        self._weights = weights
        self._benchmark = benchmark
        self._signals = signal_repository
        self._task_queue = task_queue or BoundedTaskQueue()

    def _select(self, symbols: Sequence[str] | None) -> list[AssetMeta]:
        if not symbols:
            return list(self._universe.assets)
        return [a for s in symbols if (a := self._universe.get(s)) is not None]

    async def _analyze(self, asset: AssetMeta) -> AssetAnalysis:
        inputs = await self._factor_source.get_inputs(asset)
        try:
            bias = compute_bias(asset, inputs, self._weights)
            narrative = build_narrative(bias, asset)
            expanded = build_expanded_narrative(inputs)
        except (ValueError, KeyError, ValidationError) as e:
            raise ComputeError(asset.symbol, str(e)) from e
        return AssetAnalysis(
            asset=asset, inputs=inputs, bias=bias, narrative=narrative, expanded=expanded
        )

    async def _latest(self, symbol: str, window: CorrelationWindow) -> CorrelationResult | None:
        return await self._correlations.latest(symbol, self._benchmark, window)

    async def execute(self, request: BuildTacticalBoardRequest) -> BuildTacticalBoardResponse:
        now = request.now or datetime.now(UTC)
        assets = self._select(request.symbols)
        by_symbol = {a.symbol: a for a in assets}

        jobs = await self._task_queue.run(
            [a.symbol for a in assets], lambda symbol: self._analyze(by_symbol[symbol])
        )
        response = BuildTacticalBoardResponse()
        for job in jobs:
            if job.success and job.data is not None:
                response.analyses.append(job.data)
                response.summary.processed.append(job.symbol)
            else:
                response.summary.skipped[job.symbol] = job.error or "unknown error"

        all_inputs = [a.inputs for a in response.analyses]
        response.usd_regime = resolve_usd_regime(all_inputs)
        response.risk_label = resolve_risk_label(all_inputs)

        corr_12m: dict[str, CorrelationResult] = {}
        corr_3m: dict[str, CorrelationResult] = {}
        for analysis in response.analyses:
            symbol = analysis.asset.symbol
            if (long_row := await self._latest(symbol, CorrelationWindow.M12)) is not None:
                corr_12m[symbol] = long_row
                response.correlations.append(long_row)
            if (short_row := await self._latest(symbol, CorrelationWindow.M3)) is not None:
                corr_3m[symbol] = short_row
                response.correlations.append(short_row)

        response.rows = build_tactical_board(
            [a.asset for a in response.analyses],
            {a.asset.symbol: a.bias for a in response.analyses},
            corr_12m,
            response.usd_regime,
            corr_3m,
        )
        response.summary.rows_written = len(response.rows)

        if request.record_signals and self._signals is not None:
            for row in response.rows:
                if row.action == TacticalAction.RANGE:
                    continue
                await self._signals.add(PastSignal(symbol=row.pair, action=row.action, issued_at=now))

        logger.info(
            "Tactical board built",
            rows=len(response.rows),
            usd_regime=response.usd_regime.value,
            skipped=len(response.summary.skipped),
        )
        return response
