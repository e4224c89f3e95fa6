"""Opportunities radar use case."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog
from pydantic import BaseModel, Field

from macrobias.application.use_cases.base import UseCase
from macrobias.application.use_cases.board import (
    BuildTacticalBoardRequest,
    BuildTacticalBoardUseCase,
)
from macrobias.domain.models.calendar import CalendarEvent
from macrobias.domain.models.signals import OpportunityPair, ReliabilityStatus
from macrobias.domain.ports.data_providers import CalendarSource
from macrobias.infrastructure.analysis.macro_engine.correlation_state import (
    summarize_correlations,
)
from macrobias.infrastructure.analysis.macro_engine.opportunities import (
    RADAR_SIZE,
    assess_reliability,
    calculate_opportunities_radar,
)

logger = structlog.get_logger(__name__)


class OpportunitiesRadarRequest(BaseModel):
    now: datetime | None = None
    top_n: int = Field(default=RADAR_SIZE, ge=1)


class OpportunitiesRadarResponse(BaseModel):
    opportunities: list[OpportunityPair] = Field(default_factory=list)
    reliability: ReliabilityStatus
    events: list[CalendarEvent] = Field(default_factory=list)


class OpportunitiesRadarUseCase(UseCase[OpportunitiesRadarRequest, OpportunitiesRadarResponse]):
    """Rank the board's actionable pairs and report correlation reliability."""

    def __init__(
        self,
        board_use_case: BuildTacticalBoardUseCase,
        calendar_source: CalendarSource,
    ) -> None:
        self._board = board_use_case
        self._calendar = calendar_source

    async def execute(self, request: OpportunitiesRadarRequest) -> OpportunitiesRadarResponse:
        now = request.now or datetime.now(UTC)
        board = await self._board.execute(BuildTacticalBoardRequest(now=now))
        summaries = summarize_correlations(board.correlations, board.risk_label)
        events = await self._calendar.get_upcoming_events(now, now + timedelta(hours=24))

        opportunities = calculate_opportunities_radar(
            board.rows, summaries, events, now, top_n=request.top_n
        )
        reliability = assess_reliability(summaries, events, now)
        logger.info(
            "Opportunities radar computed",
            candidates=len(board.rows),
            selected=len(opportunities),
            reliability=reliability.status,
        )
        return OpportunitiesRadarResponse(
            opportunities=opportunities, reliability=reliability, events=events
        )
