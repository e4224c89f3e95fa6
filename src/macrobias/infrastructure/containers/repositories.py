"""Repository container configuration."""

from __future__ import annotations

from dependency_injector import providers

from macrobias.infrastructure.repositories import (
    SqliteCorrelationRepository,
    SqliteSignalRepository,
    SqliteStorage,
)


def configure_repositories(settings: providers.Provider) -> dict[str, providers.Provider]:
    """Repositories share one SQLite storage at ``settings.database_path``."""
    storage = providers.Singleton(SqliteStorage, path=settings.provided.database_path)
    return {
        "storage": storage,
        "correlation_repository": providers.Singleton(SqliteCorrelationRepository, storage=storage),
        "signal_repository": providers.Singleton(SqliteSignalRepository, storage=storage),
    }
