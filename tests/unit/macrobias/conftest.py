"""Shared fixtures for macrobias unit tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from macrobias.domain.models.asset import AssetClass, AssetMeta, RiskSensitivity, UsdExposure
from macrobias.domain.models.bias import BiasInputs
from macrobias.infrastructure.weights import AssetUniverse, WeightConfig, load_weight_config


@pytest.fixture
def eurusd() -> AssetMeta:
    return AssetMeta(
        symbol="EURUSD",
        asset_class=AssetClass.FX,
        base="EUR",
        quote="USD",
        usd_exposure=UsdExposure.SHORT_USD,
        region="EU",
    )


@pytest.fixture
def usdjpy() -> AssetMeta:
    return AssetMeta(
        symbol="USDJPY",
        asset_class=AssetClass.FX,
        base="USD",
        quote="JPY",
        risk_sensitivity=RiskSensitivity.RISK_ON,
        usd_exposure=UsdExposure.LONG_USD,
        region="JP",
    )


@pytest.fixture
def xauusd() -> AssetMeta:
    return AssetMeta(
        symbol="XAUUSD",
        asset_class=AssetClass.METAL,
        base="XAU",
        quote="USD",
        risk_sensitivity=RiskSensitivity.RISK_OFF,
        usd_exposure=UsdExposure.SHORT_USD,
    )


@pytest.fixture
def spx() -> AssetMeta:
    return AssetMeta(
        symbol="SPX",
        asset_class=AssetClass.INDEX,
        risk_sensitivity=RiskSensitivity.RISK_ON,
        region="US",
    )


@pytest.fixture
def universe(eurusd: AssetMeta, usdjpy: AssetMeta, xauusd: AssetMeta, spx: AssetMeta) -> AssetUniverse:
    return AssetUniverse(assets=[eurusd, usdjpy, xauusd, spx])


@pytest.fixture
def weights() -> WeightConfig:
    return load_weight_config()


@pytest.fixture
def bearish_inputs() -> BiasInputs:
    """Strong USD, risk-off and slowing growth: bearish for EURUSD."""
    return BiasInputs(
        risk_regime=-0.8,
        usd_bias=0.9,
        inflation_momentum=-0.4,
        growth_momentum=-0.6,
        external_balance=-0.3,
        rates_context=0.5,
    )


@pytest.fixture
def mixed_inputs() -> BiasInputs:
    """Full coverage with three drivers against one among the top four."""
    return BiasInputs(
        risk_regime=-0.5,
        usd_bias=-0.3,
        inflation_momentum=0.1,
        growth_momentum=0.5,
        external_balance=-0.4,
        rates_context=-1.0,
    )


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 10, 12, 0, tzinfo=UTC)
