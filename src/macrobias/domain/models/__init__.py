"""Domain models for Macro Bias."""

from macrobias.domain.models.asset import AssetClass, AssetMeta, RiskSensitivity, UsdExposure
from macrobias.domain.models.bias import (
    BiasDriver,
    BiasInputs,
    BiasMeta,
    Direction,
    DriverSign,
    ExpandedNarrative,
    FactorKey,
    MacroBias,
    RiskLabel,
    UsdLabel,
)
from macrobias.domain.models.calendar import CalendarEvent, EventImpact
from macrobias.domain.models.correlation import (
    CorrelationOk,
    CorrelationOutcome,
    CorrelationResult,
    CorrelationSummary,
    CorrelationTrend,
    CorrelationWindow,
    InsufficientData,
    ShiftRegime,
    Stale,
)
from macrobias.domain.models.exposure import ExposureOverlap, ExposureSide, TradePosition
from macrobias.domain.models.job_results import AssetJobResult, JobSummary
from macrobias.domain.models.observation import AlignedPair, Frequency, Observation, ObservationSeries
from macrobias.domain.models.playbook import TradingAssetPlan, TradingPlaybook
from macrobias.domain.models.quality import (
    AssetSnapshot,
    IndicatorReading,
    InvariantResult,
    QualityLevel,
    QualityReport,
    QualitySnapshot,
    SeriesFreshness,
)
from macrobias.domain.models.signals import (
    HistoricalConfidence,
    InsufficientHistory,
    OpportunityPair,
    PastSignal,
    ReliabilityStatus,
)
from macrobias.domain.models.tactical import (
    ConfidenceLevel,
    NarrativeOutput,
    TacticalAction,
    TacticalRow,
    TrendLabel,
    UsdRegime,
)

__all__ = [
    # Assets and inputs
    "AssetClass",
    "AssetMeta",
    "RiskSensitivity",
    "UsdExposure",
    "Observation",
    "ObservationSeries",
    "AlignedPair",
    "Frequency",
    # Correlation
    "CorrelationWindow",
    "CorrelationOk",
    "InsufficientData",
    "Stale",
    "CorrelationOutcome",
    "CorrelationResult",
    "CorrelationSummary",
    "CorrelationTrend",
    "ShiftRegime",
    # Bias
    "BiasInputs",
    "BiasDriver",
    "BiasMeta",
    "MacroBias",
    "Direction",
    "DriverSign",
    "FactorKey",
    "RiskLabel",
    "UsdLabel",
    "ExpandedNarrative",
    # Tactical and narrative
    "TacticalAction",
    "TacticalRow",
    "ConfidenceLevel",
    "TrendLabel",
    "UsdRegime",
    "NarrativeOutput",
    # Quality
    "InvariantResult",
    "QualityLevel",
    "QualityReport",
    "QualitySnapshot",
    "AssetSnapshot",
    "SeriesFreshness",
    "IndicatorReading",
    # Calendar, history and jobs
    "CalendarEvent",
    "EventImpact",
    "PastSignal",
    "HistoricalConfidence",
    "InsufficientHistory",
    "OpportunityPair",
    "ReliabilityStatus",
    # Exposure and playbook
    "TradePosition",
    "ExposureSide",
    "ExposureOverlap",
    "TradingAssetPlan",
    "TradingPlaybook",
    "AssetJobResult",
    "JobSummary",
]
