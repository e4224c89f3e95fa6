"""Application use cases."""

from macrobias.application.use_cases.base import UseCase
from macrobias.application.use_cases.board import (
    AssetAnalysis,
    BuildTacticalBoardRequest,
    BuildTacticalBoardResponse,
    BuildTacticalBoardUseCase,
)
from macrobias.application.use_cases.correlations import (
    GetLatestCorrelationsRequest,
    GetLatestCorrelationsResponse,
    GetLatestCorrelationsUseCase,
    InspectAlignmentRequest,
    InspectAlignmentResponse,
    InspectAlignmentUseCase,
    RefreshCorrelationsRequest,
    RefreshCorrelationsResponse,
    RefreshCorrelationsUseCase,
)
from macrobias.application.use_cases.playbook import (
    BuildTradingPlaybookRequest,
    BuildTradingPlaybookResponse,
    BuildTradingPlaybookUseCase,
    ExposureOverlapRequest,
    ExposureOverlapResponse,
    ExposureOverlapUseCase,
)
from macrobias.application.use_cases.quality import (
    RunQualityChecksRequest,
    RunQualityChecksResponse,
    RunQualityChecksUseCase,
)
from macrobias.application.use_cases.radar import (
    OpportunitiesRadarRequest,
    OpportunitiesRadarResponse,
    OpportunitiesRadarUseCase,
)
from macrobias.application.use_cases.signals import (
    EvaluateSignalsRequest,
    EvaluateSignalsResponse,
    EvaluateSignalsUseCase,
    HistoricalConfidenceRequest,
    HistoricalConfidenceResponse,
    HistoricalConfidenceUseCase,
)

__all__ = [
    "UseCase",
    "AssetAnalysis",
    "BuildTacticalBoardRequest",
    "BuildTacticalBoardResponse",
    "BuildTacticalBoardUseCase",
    "GetLatestCorrelationsRequest",
    "GetLatestCorrelationsResponse",
    "GetLatestCorrelationsUseCase",
    "InspectAlignmentRequest",
    "InspectAlignmentResponse",
    "InspectAlignmentUseCase",
    "RefreshCorrelationsRequest",
    "RefreshCorrelationsResponse",
    "RefreshCorrelationsUseCase",
    "RunQualityChecksRequest",
    "RunQualityChecksResponse",
    "RunQualityChecksUseCase",
    "OpportunitiesRadarRequest",
    "OpportunitiesRadarResponse",
    "OpportunitiesRadarUseCase",
    "BuildTradingPlaybookRequest",
    "BuildTradingPlaybookResponse",
    "BuildTradingPlaybookUseCase",
    "ExposureOverlapRequest",
    "ExposureOverlapResponse",
    "ExposureOverlapUseCase",
    "EvaluateSignalsRequest",
    "EvaluateSignalsResponse",
    "EvaluateSignalsUseCase",
    "HistoricalConfidenceRequest",
    "HistoricalConfidenceResponse",
    "HistoricalConfidenceUseCase",
]
