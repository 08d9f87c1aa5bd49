"""
Health Factor Calculator.

The health factor compares the collateral value that may back debt (the
value discounted by the liquidation threshold) with the DSC minted:

    adjusted = collateral_value_usd * LIQUIDATION_THRESHOLD / LIQUIDATION_PRECISION
    health_factor = adjusted * 10**dsc_decimals / (debt * 10**usd_decimals)

A position whose discounted collateral exactly covers its debt sits at
MIN_HEALTH_FACTOR; anything below can be liquidated. An account without debt
reports MAX_HEALTH_FACTOR.
"""

from __future__ import annotations

from .config import MAX_HEALTH_FACTOR, EngineConfig
from .valuation import div_trunc


class HealthFactorCalculator:
    """Solvency ratio for a (debt, collateral value) pair."""

    def __init__(self, config: EngineConfig, dsc_decimals: int):
        self.liquidation_threshold = config.liquidation_threshold
        self.liquidation_precision = config.liquidation_precision
        self.usd_decimals = config.usd_decimals
        self.dsc_decimals = dsc_decimals

        # Discounted collateral equal to the debt, e.g. $1 backing 1 DSC
        self.min_health_factor = self._ratio(10**self.usd_decimals, 10**self.dsc_decimals)

    @property
    def threshold(self) -> tuple[int, int]:
        """Overcollateralization threshold as (numerator, denominator)."""
        return self.liquidation_threshold, self.liquidation_precision

    def adjusted_collateral(self, collateral_value_usd: int) -> int:
        return div_trunc(
            collateral_value_usd * self.liquidation_threshold,
            self.liquidation_precision,
        )

    def calculate(self, total_dsc_minted: int, collateral_value_usd: int) -> int:
        if total_dsc_minted == 0:
            return MAX_HEALTH_FACTOR
        return self._ratio(self.adjusted_collateral(collateral_value_usd), total_dsc_minted)

    def is_healthy(self, health_factor: int) -> bool:
        return health_factor >= self.min_health_factor

    def _ratio(self, adjusted_usd: int, debt: int) -> int:
        return div_trunc(
            adjusted_usd * 10**self.dsc_decimals,
            debt * 10**self.usd_decimals,
        )
