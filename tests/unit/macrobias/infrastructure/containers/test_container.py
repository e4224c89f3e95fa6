"""Unit tests for the dependency injection container."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from macrobias.application.use_cases import (
    BuildTacticalBoardUseCase,
    BuildTradingPlaybookUseCase,
    EvaluateSignalsUseCase,
    ExposureOverlapUseCase,
    HistoricalConfidenceUseCase,
    InspectAlignmentUseCase,
    RefreshCorrelationsUseCase,
)
from macrobias.domain.exceptions import InvalidConfigurationError
from macrobias.infrastructure.config import Settings, get_settings
from macrobias.infrastructure.containers import (
    Container,
    get_container,
    reset_container,
    set_container,
)
from macrobias.infrastructure.data_providers import CachedObservationSource
from macrobias.infrastructure.repositories import InMemoryCorrelationRepository


@pytest.fixture(autouse=True)
def _fresh_container() -> Iterator[None]:
    get_settings.cache_clear()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_container()


@pytest.fixture
def container(tmp_path: Path) -> Container:
    container = Container()
    container.settings.override(Settings(_env_file=None, database_path=tmp_path / "test.db"))
    return container


@pytest.mark.unit
class TestContainer:
    def test_resolves_use_cases(self, container: Container) -> None:
        assert isinstance(container.refresh_correlations_use_case(), RefreshCorrelationsUseCase)
        assert isinstance(container.build_tactical_board_use_case(), BuildTacticalBoardUseCase)
        assert isinstance(container.historical_confidence_use_case(), HistoricalConfidenceUseCase)
        assert isinstance(container.trading_playbook_use_case(), BuildTradingPlaybookUseCase)
        assert isinstance(container.exposure_overlap_use_case(), ExposureOverlapUseCase)
        assert isinstance(container.inspect_alignment_use_case(), InspectAlignmentUseCase)

    def test_signal_evaluation_uses_configured_horizon(self, tmp_path: Path) -> None:
        container = Container()
        container.settings.override(
            Settings(_env_file=None, database_path=tmp_path / "test.db", signal_horizon_days=10)
        )

        use_case = container.evaluate_signals_use_case()

        assert isinstance(use_case, EvaluateSignalsUseCase)
        assert use_case._horizon_days == 10
        assert use_case._repository is container.signal_repository()

    def test_singletons_are_shared(self, container: Container) -> None:
        assert container.cache_manager() is container.cache_manager()
        assert container.correlation_repository() is container.correlation_repository()
        assert isinstance(container.observation_source(), CachedObservationSource)

    def test_repository_override(self, container: Container) -> None:
        repository = InMemoryCorrelationRepository()
        container.correlation_repository.override(repository)

        use_case = container.get_latest_correlations_use_case()

        assert use_case._repository is repository

    def test_fred_api_key_override(self, container: Container) -> None:
        container.fred_api_key_config.override("override-key")

        assert container.benchmark_source()._api_key == "override-key"


@pytest.mark.unit
class TestGetContainer:
    def test_global_instance_is_reused(self) -> None:
        first = get_container(validate=False)

        assert get_container(validate=False) is first

    def test_api_key_gives_separate_instance(self) -> None:
        shared = get_container(validate=False)

        custom = get_container(fred_api_key="abc", validate=False)

        assert custom is not shared
        assert get_container(validate=False) is shared

    def test_set_container(self, container: Container) -> None:
        set_container(container)

        assert get_container() is container

    def test_invalid_weights_fail_at_startup(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        bad = tmp_path / "weights.json"
        bad.write_text('{"version": "broken", "weights": {}}', encoding="utf-8")
        monkeypatch.setenv("MACROBIAS_WEIGHTS_PATH", str(bad))

        with pytest.raises(InvalidConfigurationError):
            get_container()
