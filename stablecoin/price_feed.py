"""
Price Feed Model.

Simulates a Chainlink-style USD price aggregator for one collateral asset.
Prices are integers scaled by the feed's own decimals (8 for USD feeds).
"""

import time

from .interfaces import make_address


class MockV3Aggregator:
    """Simple price feed implementation for tests and simulations."""

    def __init__(self, decimals, initial_answer, address=None, description=""):
        self._decimals = decimals
        self.description = description
        self.address = address or make_address(f"feed:{description or id(self)}")

        self.round_id = 0
        self.answer = 0
        self.updated_at = 0
        self.update_answer(initial_answer)

    def decimals(self):
        """Returns the decimals the answer is scaled by."""
        return self._decimals

    def latest_price(self):
        """Returns the current (answer, updated_at) pair."""
        return self.answer, self.updated_at

    def latest_round_data(self):
        """Returns (round_id, answer, started_at, updated_at, answered_in_round)."""
        return self.round_id, self.answer, self.updated_at, self.updated_at, self.round_id

    def update_answer(self, answer):
        """Sets a new price. Zero and negative answers are accepted as-is."""
        self.answer = int(answer)
        self.round_id += 1
        self.updated_at = int(time.time())

    def set_usd_price(self, dollars):
        """Sets the price from a whole- or fractional-dollar amount."""
        self.update_answer(round(dollars * 10**self._decimals))
