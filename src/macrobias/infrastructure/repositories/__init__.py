"""Repository implementations."""

from macrobias.infrastructure.repositories.memory import (
    InMemoryCorrelationRepository,
    InMemorySignalRepository,
)
from macrobias.infrastructure.repositories.sqlite import (
    SqliteCorrelationRepository,
    SqliteSignalRepository,
    SqliteStorage,
)

__all__ = [
    "InMemoryCorrelationRepository",
    "InMemorySignalRepository",
    "SqliteStorage",
    "SqliteCorrelationRepository",
    "SqliteSignalRepository",
]
