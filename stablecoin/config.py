"""
Protocol parameters for the DSC model.

Defaults mirror the deployed protocol constants. A YAML file can override
them for simulations:

    engine:
      liquidation_threshold: 50
      liquidation_bonus: 10
      liquidation_precision: 100
      usd_decimals: 2
    dsc_decimals: 18
    collateral:
      - symbol: WETH
        decimals: 18
        oracle_decimals: 8
        initial_price: 2000
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Constants from the protocol
LIQUIDATION_THRESHOLD = 50  # 200% overcollateralized
LIQUIDATION_BONUS = 10  # 10% bonus to liquidators
LIQUIDATION_PRECISION = 100
USD_DECIMALS = 2  # USD values are reported in cents
DSC_DECIMALS = 18
ORACLE_DECIMALS = 8
MAX_HEALTH_FACTOR = 2**256 - 1

ETH_USD_PRICE = 2000
BTC_USD_PRICE = 1000


@dataclass(frozen=True)
class EngineConfig:
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_bonus: int = LIQUIDATION_BONUS
    liquidation_precision: int = LIQUIDATION_PRECISION
    usd_decimals: int = USD_DECIMALS


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str
    decimals: int = 18
    oracle_decimals: int = ORACLE_DECIMALS
    initial_price: int = ETH_USD_PRICE  # whole dollars


def _default_collateral() -> tuple[CollateralConfig, ...]:
    return (
        CollateralConfig(symbol="WETH", initial_price=ETH_USD_PRICE),
        CollateralConfig(symbol="WBTC", initial_price=BTC_USD_PRICE),
    )


@dataclass(frozen=True)
class ProtocolConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    dsc_decimals: int = DSC_DECIMALS
    collateral: tuple[CollateralConfig, ...] = field(default_factory=_default_collateral)


def _require_int(raw: dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{key} must be at least {minimum}, got {value}")
    return value


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    precision = _require_int(raw, "liquidation_precision", LIQUIDATION_PRECISION, minimum=1)
    threshold = _require_int(raw, "liquidation_threshold", LIQUIDATION_THRESHOLD, minimum=1)
    if threshold > precision:
        raise ConfigError(
            f"liquidation_threshold ({threshold}) cannot exceed liquidation_precision ({precision})"
        )
    return EngineConfig(
        liquidation_threshold=threshold,
        liquidation_bonus=_require_int(raw, "liquidation_bonus", LIQUIDATION_BONUS),
        liquidation_precision=precision,
        usd_decimals=_require_int(raw, "usd_decimals", USD_DECIMALS),
    )


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    entries: list[CollateralConfig] = []
    seen: set[str] = set()
    for item in raw:
        symbol = item.get("symbol")
        if not symbol:
            raise ConfigError("collateral entry is missing a symbol")
        if symbol in seen:
            raise ConfigError(f"duplicate collateral symbol: {symbol}")
        seen.add(symbol)
        entries.append(
            CollateralConfig(
                symbol=symbol,
                decimals=_require_int(item, "decimals", 18),
                oracle_decimals=_require_int(item, "oracle_decimals", ORACLE_DECIMALS),
                initial_price=_require_int(item, "initial_price", ETH_USD_PRICE, minimum=1),
            )
        )
    return tuple(entries)


def build_config(raw: dict[str, Any] | None) -> ProtocolConfig:
    """Build a ProtocolConfig from an already-parsed mapping."""
    raw = raw or {}
    collateral_raw = raw.get("collateral")
    collateral = _build_collateral(collateral_raw) if collateral_raw else _default_collateral()
    return ProtocolConfig(
        engine=_build_engine(raw.get("engine") or {}),
        dsc_decimals=_require_int(raw, "dsc_decimals", DSC_DECIMALS),
        collateral=collateral,
    )


def load_config(path: str | Path) -> ProtocolConfig:
    """Load and validate a YAML protocol config."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open() as fh:
        raw = yaml.safe_load(fh)

    if raw is not None and not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    config = build_config(raw)
    logger.info(
        "Loaded config from %s (%d collateral types, threshold %d/%d)",
        path,
        len(config.collateral),
        config.engine.liquidation_threshold,
        config.engine.liquidation_precision,
    )
    return config
