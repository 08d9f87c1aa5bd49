"""
Unit tests for USD valuation of collateral.
"""

import unittest

from hypothesis import given, settings
from hypothesis import strategies as st

from helpers import ETHER
from stablecoin.erc20 import ERC20Token
from stablecoin.errors import TokenNotAllowed
from stablecoin.price_feed import MockV3Aggregator
from stablecoin.valuation import ValuationEngine, div_trunc


def build_valuation(prices, usd_decimals=2, dsc_decimals=18):
    """
    prices: list of (symbol, asset_decimals, oracle_decimals, whole-dollar price)
    """
    tokens = {}
    feeds = {}
    for symbol, asset_decimals, oracle_decimals, price in prices:
        token = ERC20Token(symbol, symbol, asset_decimals)
        tokens[token.address] = token
        feeds[token.address] = MockV3Aggregator(oracle_decimals, price * 10**oracle_decimals)
    return ValuationEngine(feeds, tokens, usd_decimals, dsc_decimals), list(tokens)


class TestDivTrunc(unittest.TestCase):
    def test_rounds_toward_zero(self):
        self.assertEqual(div_trunc(7, 2), 3)
        self.assertEqual(div_trunc(-7, 2), -3)
        self.assertEqual(div_trunc(7, -2), -3)
        self.assertEqual(div_trunc(-7, -2), 3)
        self.assertEqual(div_trunc(0, 5), 0)

    def test_division_by_zero_raises(self):
        with self.assertRaises(ZeroDivisionError):
            div_trunc(1, 0)


class TestValuationEngine(unittest.TestCase):
    def setUp(self):
        self.valuation, (self.weth,) = build_valuation([("WETH", 18, 8, 2000)])

    def test_usd_value_in_reporting_precision(self):
        """$2000 at 8 oracle decimals, 18 asset decimals, cents out"""
        self.assertEqual(self.valuation.usd_value(self.weth, 15 * ETHER), 30_000 * 10**2)
        self.assertEqual(self.valuation.usd_value_with_decimals(self.weth, 15 * ETHER), (3_000_000, 2))

    def test_zero_amount_is_zero_value(self):
        self.assertEqual(self.valuation.usd_value(self.weth, 0), 0)

    def test_value_truncates(self):
        # one wei is worth far less than a cent
        self.assertEqual(self.valuation.usd_value(self.weth, 1), 0)
        # 0.0000049 ETH is $0.0098
        self.assertEqual(self.valuation.usd_value(self.weth, 4_900_000_000_000), 0)
        self.assertEqual(self.valuation.usd_value(self.weth, 5_000_000_000_000), 1)

    def test_unregistered_token(self):
        with self.assertRaises(TokenNotAllowed):
            self.valuation.usd_value("0xunknown", ETHER)
        with self.assertRaises(TokenNotAllowed):
            self.valuation.token_amount_from_usd("0xunknown", ETHER)

    def test_token_amount_from_dsc_denominated_usd(self):
        self.assertEqual(self.valuation.token_amount_from_usd(self.weth, 100 * ETHER), 5 * 10**16)

    def test_token_amount_from_reporting_precision_usd(self):
        self.assertEqual(self.valuation.token_amount_from_usd(self.weth, 3_000_000, 2), 15 * ETHER)

    def test_negative_price_passes_through(self):
        valuation, (token,) = build_valuation([("BAD", 18, 8, -2000)])
        self.assertEqual(valuation.usd_value(token, 15 * ETHER), -3_000_000)
        # truncation toward zero, not toward negative infinity
        self.assertEqual(valuation.usd_value(token, 1), 0)

    def test_zero_price_cannot_be_inverted(self):
        valuation, (token,) = build_valuation([("ZERO", 18, 8, 0)])
        self.assertEqual(valuation.usd_value(token, ETHER), 0)
        with self.assertRaises(ZeroDivisionError):
            valuation.token_amount_from_usd(token, ETHER)

    def test_oracle_is_read_on_every_call(self):
        feed = self.valuation._price_feeds[self.weth]
        self.assertEqual(self.valuation.usd_value(self.weth, ETHER), 200_000)
        feed.update_answer(1000 * 10**8)
        self.assertEqual(self.valuation.usd_value(self.weth, ETHER), 100_000)


class TestAggregateValuation(unittest.TestCase):
    def test_assets_with_different_oracle_decimals(self):
        """Each asset is scaled by its own oracle decimals before summing"""
        valuation, (weth, wbtc) = build_valuation([
            ("WETH", 18, 8, 2000),
            ("WBTC", 8, 18, 30_000),
        ])
        balances = {weth: 2 * ETHER, wbtc: 10**8}

        self.assertEqual(valuation.usd_value(weth, 2 * ETHER), 400_000)
        self.assertEqual(valuation.usd_value(wbtc, 10**8), 3_000_000)
        self.assertEqual(valuation.total_collateral_value(balances), 3_400_000)

    def test_missing_balances_count_as_zero(self):
        valuation, (weth, wbtc) = build_valuation([("WETH", 18, 8, 2000), ("WBTC", 8, 8, 1000)])
        self.assertEqual(valuation.total_collateral_value({}), 0)
        self.assertEqual(valuation.total_collateral_value({wbtc: 3 * 10**8}), 300_000)


class TestRoundTrip(unittest.TestCase):
    @given(
        amount=st.integers(min_value=0, max_value=10**30),
        price=st.integers(min_value=1, max_value=10**6),
        asset_decimals=st.sampled_from([6, 8, 18]),
        oracle_decimals=st.sampled_from([8, 18]),
        usd_decimals=st.sampled_from([2, 8, 18]),
    )
    @settings(max_examples=200)
    def test_token_amount_from_usd_inverts_usd_value(self, amount, price, asset_decimals,
                                                     oracle_decimals, usd_decimals):
        """
        PROPERTY: converting to USD and back never gains tokens and loses at
        most what one unit of the USD precision buys.
        """
        valuation, (token,) = build_valuation(
            [("TKN", asset_decimals, oracle_decimals, price)], usd_decimals=usd_decimals
        )
        value = valuation.usd_value(token, amount)
        back = valuation.token_amount_from_usd(token, value, usd_decimals)

        raw_price = price * 10**oracle_decimals
        one_usd_unit = 10**asset_decimals * 10**oracle_decimals // (raw_price * 10**usd_decimals)
        self.assertLessEqual(back, amount)
        self.assertLessEqual(amount - back, one_usd_unit + 1)


if __name__ == "__main__":
    unittest.main()
