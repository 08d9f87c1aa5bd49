"""
Simulations of the DSC protocol.

MarketSimulation drives collateral prices along random log-normal paths while a
liquidator bot watches every borrower, recording system metrics over time.

InvariantHandler performs random sequences of user actions and checks after
each one that the protocol holds more collateral value than DSC supply and
that the account it touched is solvent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import matplotlib.pyplot as plt
import numpy as np

from .errors import StablecoinError
from .interfaces import make_address
from .protocol import StablecoinProtocol

logger = logging.getLogger(__name__)


class InvariantViolation(AssertionError):
    """Raised by InvariantHandler when a protocol invariant does not hold."""


class MarketSimulation:
    """
    Runs a DSC deployment through simulated market conditions.
    """

    def __init__(self, protocol: StablecoinProtocol | None = None, seed: int | None = None):
        self.protocol = protocol or StablecoinProtocol()
        self.rng = np.random.default_rng(seed)
        self.borrowers: list[str] = []
        self.liquidator = make_address("liquidator")
        self.liquidations = 0
        self.failed_liquidations = 0

    def open_positions(self, num_borrowers: int = 10, min_ratio: float = 1.2, max_ratio: float = 2.0):
        """
        Creates borrowers that deposit random collateral and mint DSC.

        Each borrower targets a health factor drawn uniformly between
        min_ratio and max_ratio, so some positions start close to the edge.

        Args:
            num_borrowers: Number of borrowers to create
            min_ratio: Lowest target health factor
            max_ratio: Highest target health factor
        """
        engine = self.protocol.engine
        dsc_unit = 10**self.protocol.dsc.decimals()
        threshold, precision = engine.get_liquidation_threshold()

        for i in range(num_borrowers):
            user = make_address(f"borrower{i}")
            symbol = list(self.protocol.tokens)[i % len(self.protocol.tokens)]
            token = self.protocol.tokens[symbol]
            units = int(self.rng.integers(1, 50))
            amount = units * 10**token.decimals()
            self.protocol.fund(user, symbol, amount)

            value_usd = engine.get_usd_value(token.address, amount)
            target_ratio = float(self.rng.uniform(min_ratio, max_ratio))
            dollars = value_usd / 10**engine.get_usd_decimals() * threshold / precision / target_ratio
            to_mint = int(dollars) * dsc_unit
            try:
                if to_mint > 0:
                    engine.deposit_collateral_and_mint_dsc(user, token.address, amount, to_mint)
                else:
                    engine.deposit_collateral(user, token.address, amount)
            except StablecoinError as e:
                logger.info("Borrower %s could not open a position: %s", user, e)
                continue
            self.borrowers.append(user)

    def fund_liquidator(self, symbol: str = "WETH", units: int = 1000, mint_fraction: float = 0.5):
        """
        Gives the liquidator a large, conservative position whose DSC is
        used to repay unhealthy debt.
        """
        engine = self.protocol.engine
        token = self.protocol.tokens[symbol]
        amount = units * 10**token.decimals()
        self.protocol.fund(self.liquidator, symbol, amount)

        value_usd = engine.get_usd_value(token.address, amount)
        threshold, precision = engine.get_liquidation_threshold()
        dollars = value_usd / 10**engine.get_usd_decimals() * threshold / precision * mint_fraction
        to_mint = int(dollars) * 10**self.protocol.dsc.decimals()
        engine.deposit_collateral_and_mint_dsc(self.liquidator, token.address, amount, to_mint)
        self.protocol.approve_dsc(self.liquidator, to_mint)

    def liquidate_unhealthy(self) -> int:
        """
        Liquidates every borrower below the minimum health factor.

        Returns:
            Number of successful liquidations
        """
        engine = self.protocol.engine
        count = 0
        for user in self.borrowers:
            if engine.get_health_factor(user) >= engine.get_min_health_factor():
                continue
            for token in engine.get_collateral_tokens():
                debt_to_cover = self._coverable_debt(user, token)
                if debt_to_cover <= 0:
                    continue
                self.protocol.approve_dsc(self.liquidator, self.protocol.dsc.balance_of(self.liquidator))
                try:
                    engine.liquidate(self.liquidator, token, user, debt_to_cover)
                except StablecoinError as e:
                    self.failed_liquidations += 1
                    logger.debug("Liquidation of %s with %s failed: %s", user, token, e)
                    continue
                count += 1
                break
        self.liquidations += count
        return count

    def _coverable_debt(self, user: str, token: str) -> int:
        """Largest debt the user's deposit of token can pay out, bonus included."""
        engine = self.protocol.engine
        deposit = engine.get_collateral_balance_of_user(user, token)
        if deposit == 0:
            return 0
        bonus = engine.get_liquidation_bonus()
        precision = engine.get_liquidation_precision()
        dsc_decimals = self.protocol.dsc.decimals()
        value = engine.get_usd_value(token, deposit)
        max_cover = value * 10**dsc_decimals // 10**engine.get_usd_decimals() * precision // (precision + bonus)
        return min(engine.get_dsc_minted(user), max_cover, self.protocol.dsc.balance_of(self.liquidator))

    def simulate_market_scenario(self, days: int, price_volatility: float = 0.02, plot_results: bool = True):
        """
        Run a simulation with random price movements over the specified period.

        Args:
            days: Number of days to simulate
            price_volatility: Standard deviation of daily log returns for price
            plot_results: Whether to generate plots of the results

        Returns:
            Dictionary with simulation results
        """
        steps = days * 24  # hourly steps
        hourly_volatility = price_volatility / np.sqrt(24)
        symbols = list(self.protocol.tokens)
        engine = self.protocol.engine

        # Arrays to store history
        time_points = np.arange(1, steps + 1) / 24
        price_points = {symbol: np.zeros(steps) for symbol in symbols}
        collateral_points = np.zeros(steps)
        supply_points = np.zeros(steps)
        unhealthy_points = np.zeros(steps)
        liquidation_points = np.zeros(steps)

        prices = {
            symbol: self.protocol.price_feeds[symbol].latest_price()[0]
            / 10**self.protocol.price_feeds[symbol].decimals()
            for symbol in symbols
        }
        log_returns = self.rng.normal(0, hourly_volatility, (steps, len(symbols)))
        usd_unit = 10**engine.get_usd_decimals()

        for i in range(steps):
            for j, symbol in enumerate(symbols):
                prices[symbol] *= float(np.exp(log_returns[i, j]))
                self.protocol.set_price(symbol, prices[symbol])
                price_points[symbol][i] = prices[symbol]

            liquidation_points[i] = self.liquidate_unhealthy()

            collateral_points[i] = self.protocol.total_collateral_value() / usd_unit
            supply_points[i] = self.protocol.total_dsc_value() / usd_unit
            unhealthy_points[i] = sum(
                1 for user in self.borrowers
                if engine.get_health_factor(user) < engine.get_min_health_factor()
            )

        if plot_results:
            self.plot(time_points, price_points, collateral_points, supply_points,
                      unhealthy_points, liquidation_points)

        final_ratio = collateral_points[-1] / supply_points[-1] if steps and supply_points[-1] else float("inf")
        return {
            "final_prices": {symbol: prices[symbol] for symbol in symbols},
            "final_collateral_value": float(collateral_points[-1]) if steps else 0.0,
            "final_dsc_supply": float(supply_points[-1]) if steps else 0.0,
            "final_collateral_ratio": float(final_ratio),
            "unhealthy_accounts": int(unhealthy_points[-1]) if steps else 0,
            "liquidations": self.liquidations,
            "failed_liquidations": self.failed_liquidations,
            "history": {
                "days": time_points,
                "prices": price_points,
                "collateral_value": collateral_points,
                "dsc_supply": supply_points,
                "unhealthy": unhealthy_points,
                "liquidations": liquidation_points,
            },
        }

    def plot(self, time_points, price_points, collateral_points, supply_points,
             unhealthy_points, liquidation_points):
        fig, axs = plt.subplots(4, 1, figsize=(12, 16), sharex=True)

        for symbol, points in price_points.items():
            axs[0].plot(time_points, points, label=symbol)
        axs[0].set_title('Collateral Prices')
        axs[0].set_ylabel('USD')
        axs[0].legend()

        axs[1].plot(time_points, collateral_points, label='Collateral value')
        axs[1].plot(time_points, supply_points, label='DSC supply')
        axs[1].set_title('Collateral Value vs DSC Supply')
        axs[1].set_ylabel('USD')
        axs[1].legend()

        axs[2].plot(time_points, unhealthy_points)
        axs[2].set_title('Accounts Below Minimum Health Factor')
        axs[2].set_ylabel('Count')

        axs[3].bar(time_points, liquidation_points, width=1 / 24)
        axs[3].set_title('Liquidations')
        axs[3].set_ylabel('Count')
        axs[3].set_xlabel('Days')

        plt.tight_layout()
        plt.show()
        return fig


@dataclass
class ActionStats:
    attempted: int = 0
    succeeded: int = 0
    rejected: dict[str, int] = field(default_factory=dict)

    def record_rejection(self, exc: Exception) -> None:
        name = type(exc).__name__
        self.rejected[name] = self.rejected.get(name, 0) + 1


class InvariantHandler:
    """
    Random-action driver that checks protocol invariants after every call.

    Actions are deposit, mint, burn, redeem and liquidate, performed by a
    fixed set of actors. Prices stay fixed unless price_volatility is set;
    a price crash can make the protocol undercollateralized, which is a
    known systemic risk rather than an invariant failure.
    """

    ACTIONS = ("deposit", "mint", "burn", "redeem", "liquidate")

    def __init__(self, protocol: StablecoinProtocol | None = None, num_actors: int = 3,
                 seed: int | None = None, price_volatility: float = 0.0):
        self.protocol = protocol or StablecoinProtocol()
        self.rng = np.random.default_rng(seed)
        self.actors = [make_address(f"actor{i}") for i in range(num_actors)]
        self.price_volatility = price_volatility
        self.stats = {action: ActionStats() for action in self.ACTIONS}

    def run(self, steps: int) -> dict[str, ActionStats]:
        for _ in range(steps):
            if self.price_volatility:
                self._move_prices()
            action = self.ACTIONS[int(self.rng.integers(0, len(self.ACTIONS)))]
            self.step(action)
        return self.stats

    def step(self, action: str) -> None:
        engine = self.protocol.engine
        actor = self.actors[int(self.rng.integers(0, len(self.actors)))]
        token = engine.get_collateral_tokens()[int(self.rng.integers(0, len(engine.get_collateral_tokens())))]
        symbol = next(s for s, t in self.protocol.tokens.items() if t.address == token)
        stats = self.stats[action]
        stats.attempted += 1

        try:
            if action == "deposit":
                amount = int(self.rng.integers(1, 100)) * 10**self.protocol.tokens[symbol].decimals()
                self.protocol.fund(actor, symbol, amount)
                engine.deposit_collateral(actor, token, amount)
            elif action == "mint":
                engine.mint_dsc(actor, self._mintable(actor))
            elif action == "burn":
                amount = self._random_up_to(engine.get_dsc_minted(actor))
                self.protocol.approve_dsc(actor, amount)
                engine.burn_dsc(actor, amount)
            elif action == "redeem":
                amount = self._random_up_to(engine.get_collateral_balance_of_user(actor, token))
                engine.redeem_collateral(actor, token, amount)
            else:
                target = self.actors[int(self.rng.integers(0, len(self.actors)))]
                debt = min(engine.get_dsc_minted(target), self.protocol.dsc.balance_of(actor))
                self.protocol.approve_dsc(actor, debt)
                engine.liquidate(actor, token, target, debt)
        except StablecoinError as exc:
            stats.record_rejection(exc)
        else:
            stats.succeeded += 1
            # deposits and burns may leave an underwater account still underwater
            if action in ("mint", "redeem", "liquidate"):
                self._check_solvent(actor)

        self.check_invariants()

    def check_invariants(self) -> None:
        collateral = self.protocol.total_collateral_value()
        supply = self.protocol.total_dsc_value()
        if self.price_volatility == 0 and collateral < supply:
            raise InvariantViolation(
                f"Protocol holds {collateral} USD of collateral against {supply} USD of DSC"
            )

        engine = self.protocol.engine
        minted = sum(engine.get_dsc_minted(user) for user in engine.get_users())
        if minted != self.protocol.dsc.total_supply:
            raise InvariantViolation(
                f"Ledger debt {minted} does not match DSC supply {self.protocol.dsc.total_supply}"
            )
        for symbol, token in self.protocol.tokens.items():
            deposited = sum(engine.get_collateral_balance_of_user(user, token.address)
                            for user in engine.get_users())
            if deposited != token.balance_of(engine.address):
                raise InvariantViolation(
                    f"Ledger holds {deposited} {symbol} but engine custody is {token.balance_of(engine.address)}"
                )

    def _check_solvent(self, user: str) -> None:
        engine = self.protocol.engine
        if engine.get_dsc_minted(user) == 0:
            return
        if engine.get_health_factor(user) < engine.get_min_health_factor():
            raise InvariantViolation(f"{user} left insolvent after a successful action")

    def _mintable(self, user: str) -> int:
        engine = self.protocol.engine
        debt, value = engine.get_account_information(user)
        threshold, precision = engine.get_liquidation_threshold()
        capacity = (value * threshold // precision) * 10**self.protocol.dsc.decimals() // 10**engine.get_usd_decimals()
        return self._random_up_to(max(capacity - debt, 0))

    def _random_up_to(self, limit: int) -> int:
        """Random amount in [0, limit]; zero is kept to exercise rejections."""
        if limit <= 0:
            return 0
        fraction = float(self.rng.uniform(0, 1))
        return min(limit, int(limit * fraction))

    def _move_prices(self) -> None:
        for symbol, feed in self.protocol.price_feeds.items():
            price = feed.latest_price()[0] / 10**feed.decimals()
            self.protocol.set_price(symbol, price * float(np.exp(self.rng.normal(0, self.price_volatility))))
