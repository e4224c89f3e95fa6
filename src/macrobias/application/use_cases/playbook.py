"""Trading playbook and USD exposure overlap use cases."""

from __future__ import annotations

from datetime import datetime

import structlog
from pydantic import BaseModel, Field

from macrobias.application.use_cases.base import UseCase
from macrobias.application.use_cases.board import (
    BuildTacticalBoardRequest,
    BuildTacticalBoardUseCase,
)
from macrobias.domain.models.correlation import CorrelationSummary
from macrobias.domain.models.exposure import ExposureOverlap, TradePosition
from macrobias.domain.models.playbook import TradingPlaybook
from macrobias.domain.ports.data_providers import MacroFactorSource
from macrobias.infrastructure.analysis.macro_engine.correlation_state import (
    summarize_correlations,
)
from macrobias.infrastructure.analysis.macro_engine.exposure import calculate_exposure_overlap
from macrobias.infrastructure.analysis.macro_engine.playbook import build_trading_playbook

logger = structlog.get_logger(__name__)


class BuildTradingPlaybookRequest(BaseModel):
    symbols: list[str] | None = Field(default=None, description="Subset of the universe; None = all")
    now: datetime | None = None


class BuildTradingPlaybookResponse(BaseModel):
    playbook: TradingPlaybook


class BuildTradingPlaybookUseCase(
    UseCase[BuildTradingPlaybookRequest, BuildTradingPlaybookResponse]
):
    """Turn the current board into a long/short plan for the USD benchmark and USD pairs."""

    def __init__(
        self,
        board_use_case: BuildTacticalBoardUseCase,
        factor_source: MacroFactorSource,
        benchmark: str = "DXY",
    ) -> None:
        self._board = board_use_case
        self._factors = factor_source
        self._benchmark = benchmark

    async def execute(self, request: BuildTradingPlaybookRequest) -> BuildTradingPlaybookResponse:
        board = await self._board.execute(
            BuildTacticalBoardRequest(symbols=request.symbols, now=request.now)
        )
        summaries = summarize_correlations(board.correlations, board.risk_label)
        readings = await self._factors.get_indicator_readings()
        playbook = build_trading_playbook(
            [a.asset for a in board.analyses],
            summaries,
            board.usd_regime,
            board.risk_label,
            benchmark=self._benchmark,
            readings=readings,
            expanded={a.asset.symbol: a.expanded for a in board.analyses},
        )
        logger.info(
            "Trading playbook computed",
            assets=len(playbook.assets),
            usd_direction=playbook.usd_direction.value,
        )
        return BuildTradingPlaybookResponse(playbook=playbook)


class ExposureOverlapRequest(BaseModel):
    positions: list[TradePosition] = Field(default_factory=list)


class ExposureOverlapResponse(BaseModel):
    overlap: ExposureOverlap


class ExposureOverlapUseCase(UseCase[ExposureOverlapRequest, ExposureOverlapResponse]):
    """Measure how much of a set of trades is one bet on the USD."""

    def __init__(self, board_use_case: BuildTacticalBoardUseCase) -> None:
        self._board = board_use_case

    async def execute(self, request: ExposureOverlapRequest) -> ExposureOverlapResponse:
        summaries: dict[str, CorrelationSummary] = {}
        if request.positions:
            board = await self._board.execute(
                BuildTacticalBoardRequest(symbols=sorted({p.pair for p in request.positions}))
            )
            summaries = summarize_correlations(board.correlations, board.risk_label)
        overlap = calculate_exposure_overlap(request.positions, summaries)
        return ExposureOverlapResponse(overlap=overlap)
