"""
Valuation Engine.

Converts collateral amounts to USD values and back. All arithmetic is on
integers; every division truncates toward zero, including when an oracle
reports a negative price.

    usd_value = price * amount * 10**usd_decimals
                / (10**asset_decimals * 10**oracle_decimals)

    token_amount = usd_amount * 10**oracle_decimals * 10**asset_decimals
                   / (price * 10**usd_amount_decimals)

Every USD value shares one reporting precision (usd_decimals), so values of
assets whose oracles use different decimals can be summed directly.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .errors import TokenNotAllowed
from .interfaces import AssetTransferAdapter, PriceOracleAdapter

logger = logging.getLogger(__name__)


def div_trunc(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


class ValuationEngine:
    """Prices registered collateral through its oracle."""

    def __init__(
        self,
        price_feeds: Mapping[str, PriceOracleAdapter],
        tokens: Mapping[str, AssetTransferAdapter],
        usd_decimals: int,
        dsc_decimals: int,
    ):
        self._price_feeds = price_feeds
        self._tokens = tokens
        self.usd_decimals = usd_decimals
        self.dsc_decimals = dsc_decimals

    def _quote(self, token: str) -> tuple[int, int, int]:
        """Fresh (price, oracle_decimals, asset_decimals) for a registered token."""
        feed = self._price_feeds.get(token)
        if feed is None:
            raise TokenNotAllowed(token)
        price, _ = feed.latest_price()
        return price, feed.decimals(), self._tokens[token].decimals()

    def usd_value_with_decimals(self, token: str, amount: int) -> tuple[int, int]:
        """Returns (value, usd_decimals) for amount of token."""
        price, oracle_decimals, asset_decimals = self._quote(token)
        value = div_trunc(
            price * amount * 10**self.usd_decimals,
            10**asset_decimals * 10**oracle_decimals,
        )
        logger.debug("usd value of %d %s at price %d: %d", amount, token, price, value)
        return value, self.usd_decimals

    def usd_value(self, token: str, amount: int) -> int:
        return self.usd_value_with_decimals(token, amount)[0]

    def token_amount_from_usd(
        self, token: str, usd_amount: int, usd_decimals: int | None = None
    ) -> int:
        """
        Amount of token worth usd_amount.

        usd_decimals is the scale of usd_amount; it defaults to the DSC
        decimals because liquidations convert DSC-denominated debt.
        """
        if usd_decimals is None:
            usd_decimals = self.dsc_decimals
        price, oracle_decimals, asset_decimals = self._quote(token)
        return div_trunc(
            usd_amount * 10**oracle_decimals * 10**asset_decimals,
            price * 10**usd_decimals,
        )

    def total_collateral_value(self, balances: Mapping[str, int]) -> int:
        """
        Sums the USD value of balances over every registered token, in
        registration order.
        """
        total = 0
        for token in self._price_feeds:
            total += self.usd_value(token, balances.get(token, 0))
        return total
