"""Ports (interfaces) the engine depends on."""

from macrobias.domain.ports.data_providers import (
    CalendarSource,
    DataProvider,
    MacroFactorSource,
    ObservationSource,
)
from macrobias.domain.ports.repositories import CorrelationRepository, SignalRepository

__all__ = [
    "DataProvider",
    "ObservationSource",
    "MacroFactorSource",
    "CalendarSource",
    "CorrelationRepository",
    "SignalRepository",
]
