"""
Unit tests for the health factor calculation.
"""

import unittest

from helpers import ETHER
from stablecoin.config import MAX_HEALTH_FACTOR, EngineConfig
from stablecoin.health import HealthFactorCalculator


class TestHealthFactorCalculator(unittest.TestCase):
    def setUp(self):
        self.calculator = HealthFactorCalculator(EngineConfig(), dsc_decimals=18)

    def test_no_debt_is_max(self):
        self.assertEqual(self.calculator.calculate(0, 0), MAX_HEALTH_FACTOR)
        self.assertEqual(self.calculator.calculate(0, 1_000_000), MAX_HEALTH_FACTOR)

    def test_threshold_pair(self):
        self.assertEqual(self.calculator.threshold, (50, 100))

    def test_min_health_factor_is_one(self):
        self.assertEqual(self.calculator.min_health_factor, 1)
        calculator = HealthFactorCalculator(EngineConfig(usd_decimals=18), dsc_decimals=6)
        self.assertEqual(calculator.min_health_factor, 1)

    def test_half_of_collateral_value_is_the_boundary(self):
        """$2000 of collateral backs exactly 1000 DSC"""
        health_factor = self.calculator.calculate(1000 * ETHER, 2000 * 10**2)
        self.assertEqual(health_factor, self.calculator.min_health_factor)
        self.assertTrue(self.calculator.is_healthy(health_factor))

    def test_minting_full_value_is_insolvent(self):
        health_factor = self.calculator.calculate(2000 * ETHER, 2000 * 10**2)
        self.assertEqual(health_factor, 0)
        self.assertFalse(self.calculator.is_healthy(health_factor))

    def test_one_wei_over_the_boundary_is_insolvent(self):
        self.assertFalse(self.calculator.is_healthy(self.calculator.calculate(1000 * ETHER + 1, 2000 * 10**2)))

    def test_ratio_scales_with_collateral(self):
        self.assertEqual(self.calculator.calculate(100 * ETHER, 20_000 * 10**2), 100)

    def test_custom_threshold(self):
        calculator = HealthFactorCalculator(EngineConfig(liquidation_threshold=80), dsc_decimals=18)
        self.assertEqual(calculator.threshold, (80, 100))
        self.assertTrue(calculator.is_healthy(calculator.calculate(1600 * ETHER, 2000 * 10**2)))
        self.assertFalse(calculator.is_healthy(calculator.calculate(1601 * ETHER, 2000 * 10**2)))

    def test_adjusted_collateral(self):
        self.assertEqual(self.calculator.adjusted_collateral(2001), 1000)


if __name__ == "__main__":
    unittest.main()
