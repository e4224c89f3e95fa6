"""Weight table and asset universe loading.

Both files are validated once, at load time, into typed models. Any shape
mismatch raises InvalidConfigurationError so a bad deployment aborts before
serving instead of silently falling back to defaults.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from macrobias.domain.exceptions import InvalidConfigurationError
from macrobias.domain.models.asset import AssetClass, AssetMeta
from macrobias.domain.models.bias import FactorKey

logger = structlog.get_logger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-5


class BiasThresholds(BaseModel):
    neutral: float = Field(default=10.0, ge=0.0, lt=100.0)


class ConfidenceParams(BaseModel):
    """Constants of the confidence formula."""

    floor: float = Field(default=0.2, ge=0.0, le=1.0)
    ceiling: float = Field(default=0.9, ge=0.0, le=1.0)
    coverage_weight: float = Field(default=0.6, ge=0.0)
    coherence_weight: float = Field(default=0.2, ge=0.0)
    coherence_bonus: float = Field(default=0.05, ge=0.0)
    conflict_penalty: float = Field(default=0.1, ge=0.0)
    top_drivers: int = Field(default=4, ge=2)

    @model_validator(mode="after")
    def _floor_below_ceiling(self) -> ConfidenceParams:
        if self.floor > self.ceiling:
            raise ValueError("confidence floor must not exceed ceiling")
        return self


class WeightConfig(BaseModel):
    """Versioned factor weights per asset class."""

    version: str
    thresholds: BiasThresholds = Field(default_factory=BiasThresholds)
    confidence: ConfidenceParams = Field(default_factory=ConfidenceParams)
    weights: dict[AssetClass, dict[FactorKey, float]]

    @field_validator("weights")
    @classmethod
    def _validate_tables(
        cls, weights: dict[AssetClass, dict[FactorKey, float]]
    ) -> dict[AssetClass, dict[FactorKey, float]]:
        missing_classes = [c.value for c in AssetClass if c not in weights]
        if missing_classes:
            raise ValueError(f"missing weight tables for asset classes: {missing_classes}")

        for asset_class, table in weights.items():
            missing = [k.value for k in FactorKey if k not in table]
            if missing:
                raise ValueError(f"{asset_class.value}: missing factor weights {missing}")
            negative = [k.value for k, w in table.items() if w < 0]
            if negative:
                raise ValueError(f"{asset_class.value}: negative weights for {negative}")
            total = sum(table.values())
            if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
                raise ValueError(f"{asset_class.value}: weights sum to {total:.6f}, expected 1.0")
        return weights

    def for_class(self, asset_class: AssetClass) -> dict[FactorKey, float]:
        return self.weights[asset_class]


class AssetUniverse(BaseModel):
    assets: list[AssetMeta] = Field(..., min_length=1)

    @field_validator("assets")
    @classmethod
    def _unique_symbols(cls, assets: list[AssetMeta]) -> list[AssetMeta]:
        seen: set[str] = set()
        for asset in assets:
            if asset.symbol in seen:
                raise ValueError(f"duplicate asset symbol: {asset.symbol}")
            seen.add(asset.symbol)
        return assets

    def get(self, symbol: str) -> AssetMeta | None:
        return next((a for a in self.assets if a.symbol == symbol.upper()), None)


def _read_json(path: Path | None, bundled_name: str) -> Any:
    try:
        if path is None:
            text = resources.files("macrobias.data").joinpath(bundled_name).read_text("utf-8")
        else:
            text = Path(path).read_text(encoding="utf-8")
        return json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        source = str(path) if path is not None else f"bundled {bundled_name}"
        raise InvalidConfigurationError(f"Cannot read {source}: {e}") from e


def load_weight_config(path: Path | None = None) -> WeightConfig:
    """Load and validate the weight table.

    Args:
        path: JSON file; None loads the bundled ``bias_weights.json``

    Raises:
        InvalidConfigurationError: on unreadable JSON or any validation failure
    """
    raw = _read_json(path, "bias_weights.json")
    try:
        config = WeightConfig.model_validate(raw)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid weight configuration: {e}") from e
    logger.debug("Loaded weight configuration", version=config.version, path=str(path))
    return config


def load_universe(path: Path | None = None) -> AssetUniverse:
    """Load and validate the asset universe (bundled ``universe.json`` by default)."""
    raw = _read_json(path, "universe.json")
    try:
        universe = AssetUniverse.model_validate(raw)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid asset universe: {e}") from e
    logger.debug("Loaded asset universe", assets=len(universe.assets))
    return universe


def bundled_data_path(name: str) -> Path:
    """Filesystem path of a file shipped in ``macrobias.data``."""
    return Path(str(resources.files("macrobias.data").joinpath(name)))
