"""Main dependency injection container configuration.

Composes settings, validated configuration files, data providers,
repositories and use cases into a single Container class.
"""

from __future__ import annotations

from dependency_injector import containers, providers

from macrobias.application.use_cases import (
    BuildTacticalBoardUseCase,
    BuildTradingPlaybookUseCase,
    EvaluateSignalsUseCase,
    ExposureOverlapUseCase,
    GetLatestCorrelationsUseCase,
    HistoricalConfidenceUseCase,
    InspectAlignmentUseCase,
    OpportunitiesRadarUseCase,
    RefreshCorrelationsUseCase,
    RunQualityChecksUseCase,
)
from macrobias.infrastructure.config import get_settings
from macrobias.infrastructure.containers.data_providers import configure_data_providers
from macrobias.infrastructure.containers.repositories import configure_repositories
from macrobias.infrastructure.jobs import BoundedTaskQueue
from macrobias.infrastructure.weights import load_universe, load_weight_config


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the macro bias engine.

    To provide your own FRED API key (for library integrators):
        container = get_container(fred_api_key="your-fred-api-key")

    Or override after creation:
        container = Container()
        container.fred_api_key_config.override("your-fred-api-key")
        container.correlation_repository.override(InMemoryCorrelationRepository())
    """

    # Configuration
    settings = providers.Singleton(get_settings)
    fred_api_key_config = providers.Object(None)

    # Validated configuration files (InvalidConfigurationError on first access)
    weight_config = providers.Singleton(load_weight_config, path=settings.provided.weights_path)
    universe = providers.Singleton(load_universe, path=settings.provided.universe_path)

    # Data providers
    # Note: providers are assigned individually so they can be overridden by name
    _data_providers_config = configure_data_providers(settings, universe, fred_api_key_config)
    cache_manager = _data_providers_config["cache_manager"]
    benchmark_source = _data_providers_config["benchmark_source"]
    asset_source = _data_providers_config["asset_source"]
    observation_source = _data_providers_config["observation_source"]
    factor_source = _data_providers_config["factor_source"]
    calendar_source = _data_providers_config["calendar_source"]

    # Repositories (singletons sharing one SQLite storage)
    _repositories_config = configure_repositories(settings)
    storage = _repositories_config["storage"]
    correlation_repository = _repositories_config["correlation_repository"]
    signal_repository = _repositories_config["signal_repository"]

    task_queue = providers.Factory(BoundedTaskQueue, concurrency=settings.provided.job_concurrency)

    # Use cases
    refresh_correlations_use_case = providers.Factory(
        RefreshCorrelationsUseCase,
        source=observation_source,
        repository=correlation_repository,
        universe=universe,
        benchmark=settings.provided.benchmark_symbol,
        history_days=settings.provided.history_days,
        max_fill_days=settings.provided.max_fill_days,
        max_staleness_days=settings.provided.max_staleness_days,
        task_queue=task_queue,
    )
    get_latest_correlations_use_case = providers.Factory(
        GetLatestCorrelationsUseCase,
        repository=correlation_repository,
        benchmark=settings.provided.benchmark_symbol,
    )
    inspect_alignment_use_case = providers.Factory(
        InspectAlignmentUseCase,
        source=observation_source,
        benchmark=settings.provided.benchmark_symbol,
        history_days=settings.provided.history_days,
        max_fill_days=settings.provided.max_fill_days,
        max_staleness_days=settings.provided.max_staleness_days,
    )
    build_tactical_board_use_case = providers.Factory(
        BuildTacticalBoardUseCase,
        factor_source=factor_source,
        correlation_repository=correlation_repository,
        universe=universe,
        weights=weight_config,
        benchmark=settings.provided.benchmark_symbol,
        signal_repository=signal_repository,
        task_queue=task_queue,
    )
    run_quality_checks_use_case = providers.Factory(
        RunQualityChecksUseCase,
        board_use_case=build_tactical_board_use_case,
        calendar_source=calendar_source,
        factor_source=factor_source,
    )
    opportunities_radar_use_case = providers.Factory(
        OpportunitiesRadarUseCase,
        board_use_case=build_tactical_board_use_case,
        calendar_source=calendar_source,
    )
    trading_playbook_use_case = providers.Factory(
        BuildTradingPlaybookUseCase,
        board_use_case=build_tactical_board_use_case,
        factor_source=factor_source,
        benchmark=settings.provided.benchmark_symbol,
    )
    exposure_overlap_use_case = providers.Factory(
        ExposureOverlapUseCase,
        board_use_case=build_tactical_board_use_case,
    )
    evaluate_signals_use_case = providers.Factory(
        EvaluateSignalsUseCase,
        repository=signal_repository,
        source=observation_source,
        horizon_days=settings.provided.signal_horizon_days,
        task_queue=task_queue,
    )
    historical_confidence_use_case = providers.Factory(
        HistoricalConfidenceUseCase,
        repository=signal_repository,
    )


# Global container instance, created on first use (can be overridden for testing)
_container: Container | None = None


def get_container(fred_api_key: str | None = None, validate: bool = True) -> Container:
    """Get the global dependency injection container.

    Args:
        fred_api_key: Optional FRED API key. If given, a new container using it is
                     returned and the global instance is left untouched.
        validate: Load the weight table and asset universe immediately so that
                  configuration errors surface at startup.

    Returns:
        Container instance

    Raises:
        InvalidConfigurationError: If validate is True and a configuration file is invalid
    """
    global _container
    if _container is not None and fred_api_key is None:
        return _container

    container_instance = Container()
    if fred_api_key is not None:
        container_instance.fred_api_key_config.override(fred_api_key)
    if validate:
        container_instance.weight_config()
        container_instance.universe()

    if fred_api_key is not None:
        return container_instance
    _container = container_instance
    return _container


def set_container(container: Container) -> None:
    """Set a custom container (useful for testing).

    Args:
        container: Container instance to use
    """
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    _container = None
