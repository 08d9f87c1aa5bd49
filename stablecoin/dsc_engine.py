"""
DSC Engine Model.

This module simulates the DSCEngine contract, the core of the Decentralized
Stable Coin system. The engine:
1. Holds collateral (wETH, wBTC) deposited by users
2. Mints DSC against that collateral, up to the liquidation threshold
3. Burns DSC to pay debt back and releases collateral
4. Lets third parties liquidate accounts whose health factor is too low

The system is designed to stay overcollateralized: the value of all
collateral, discounted by the liquidation threshold, must cover all DSC.

Every public operation that changes state runs as one unit. It holds the
re-entrancy lock while it runs, and if any step raises, the ledger, the event
log and every token touched are restored to their state before the call.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Sequence

from .config import EngineConfig
from .dsc_token import DecentralizedStableCoin
from .errors import (
    AmountMustBeMoreThanZero,
    ConfigLengthMismatch,
    HealthFactorBelowMinimum,
    HealthFactorIsFine,
    HealthFactorNotImproved,
    MintFailed,
    ReentrantCall,
    TokenNotAllowed,
    TransferFailed,
    ZeroAddressNotAllowed,
)
from .health import HealthFactorCalculator
from .interfaces import (
    AssetTransferAdapter,
    PriceOracleAdapter,
    is_zero_address,
    make_address,
)
from .position_ledger import PositionLedger
from .valuation import ValuationEngine, div_trunc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollateralDeposited:
    user: str
    token: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    redeemed_from: str
    redeemed_to: str
    token: str
    amount: int


class DSCEngine:
    """
    Simulates the DSCEngine contract.

    Callers pass their own address as the first argument of each operation;
    it stands in for the transaction sender.
    """

    def __init__(
        self,
        collateral_tokens: Sequence[AssetTransferAdapter],
        price_feeds: Sequence[PriceOracleAdapter],
        dsc: DecentralizedStableCoin,
        config: EngineConfig | None = None,
        ledger: PositionLedger | None = None,
        address: str | None = None,
    ):
        """
        Registers the collateral tokens and their price feeds.

        Args:
            collateral_tokens: Token adapters accepted as collateral
            price_feeds: USD price feed for each token, in the same order
            dsc: The DSC token; the engine must become its owner before minting
            config: Liquidation parameters and USD reporting precision
            ledger: Position store; a fresh one is created if omitted
            address: The engine's own account address

        Raises:
            ConfigLengthMismatch: If the two lists differ in length
            ZeroAddressNotAllowed: If any token, feed or the DSC has no address
        """
        if len(collateral_tokens) != len(price_feeds):
            raise ConfigLengthMismatch(
                f"{len(collateral_tokens)} tokens but {len(price_feeds)} price feeds"
            )
        if dsc is None or is_zero_address(getattr(dsc, "address", None)):
            raise ZeroAddressNotAllowed("DSC token address cannot be zero")

        self.config = config or EngineConfig()
        self.address = address or make_address("dsc-engine")

        # Insertion order is the iteration order for aggregate valuation
        self._tokens: dict[str, AssetTransferAdapter] = {}
        self._price_feeds: dict[str, PriceOracleAdapter] = {}
        for token, feed in zip(collateral_tokens, price_feeds):
            token_address = getattr(token, "address", None)
            if is_zero_address(token_address) or is_zero_address(getattr(feed, "address", None)):
                raise ZeroAddressNotAllowed("Collateral token and price feed addresses cannot be zero")
            self._tokens[token_address] = token
            self._price_feeds[token_address] = feed

        self._dsc = dsc
        self._ledger = ledger if ledger is not None else PositionLedger()
        self._valuation = ValuationEngine(
            self._price_feeds, self._tokens, self.config.usd_decimals, dsc.decimals()
        )
        self._health = HealthFactorCalculator(self.config, dsc.decimals())

        self.events: list[CollateralDeposited | CollateralRedeemed] = []
        self._locked = False

    # ------------------------------------------------------------------
    # Transaction handling
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        if self._locked:
            raise ReentrantCall(f"{operation} called while another operation is running")
        self._locked = True
        checkpoint = self._checkpoint()
        try:
            yield
        except Exception as exc:
            self._rollback(checkpoint)
            logger.warning("%s rolled back: %s: %s", operation, type(exc).__name__, exc)
            raise
        finally:
            self._locked = False

    def _participants(self):
        return [*self._tokens.values(), self._dsc]

    def _checkpoint(self):
        return (
            self._ledger.snapshot(),
            len(self.events),
            [(token, token.snapshot()) for token in self._participants()],
        )

    def _rollback(self, checkpoint):
        ledger_state, event_count, token_states = checkpoint
        self._ledger.restore(ledger_state)
        del self.events[event_count:]
        for token, state in token_states:
            token.restore(state)

    # ------------------------------------------------------------------
    # External functions
    # ------------------------------------------------------------------

    def deposit_collateral_and_mint_dsc(self, user, token, amount_collateral, amount_dsc_to_mint):
        """
        Deposits collateral and mints DSC in one step.

        Args:
            user: Address of the depositor
            token: Address of the collateral token
            amount_collateral: Amount of collateral to deposit
            amount_dsc_to_mint: Amount of DSC to mint
        """
        with self._transaction("deposit_collateral_and_mint_dsc"):
            self._deposit_collateral(user, token, amount_collateral)
            self._mint_dsc(user, amount_dsc_to_mint)
        logger.info("%s deposited %d of %s and minted %d DSC",
                    user, amount_collateral, token, amount_dsc_to_mint)

    def deposit_collateral(self, user, token, amount):
        """
        Deposits collateral into the engine.

        The user must have approved the engine to pull amount of token.

        Raises:
            AmountMustBeMoreThanZero: If amount is not positive
            TokenNotAllowed: If token is not registered collateral
            TransferFailed: If the token refuses the pull
        """
        with self._transaction("deposit_collateral"):
            self._deposit_collateral(user, token, amount)
        logger.info("%s deposited %d of %s", user, amount, token)

    def redeem_collateral_for_dsc(self, user, token, amount_collateral, amount_dsc_to_burn):
        """
        Burns DSC and redeems collateral in one step.

        Args:
            user: Address of the redeemer
            token: Address of the collateral token
            amount_collateral: Amount of collateral to redeem
            amount_dsc_to_burn: Amount of DSC to burn
        """
        with self._transaction("redeem_collateral_for_dsc"):
            self._burn_dsc(amount_dsc_to_burn, on_behalf_of=user, dsc_from=user)
            self._redeem_collateral(token, amount_collateral, user, user)
            self._revert_if_health_factor_is_broken(user)
        logger.info("%s burned %d DSC and redeemed %d of %s",
                    user, amount_dsc_to_burn, amount_collateral, token)

    def redeem_collateral(self, user, token, amount):
        """
        Withdraws collateral back to the user.

        Raises:
            AmountMustBeMoreThanZero: If amount is not positive
            InsufficientCollateral: If amount exceeds the user's deposit
            TransferFailed: If the token refuses the transfer
            HealthFactorBelowMinimum: If the withdrawal breaks the user's health factor
        """
        with self._transaction("redeem_collateral"):
            self._redeem_collateral(token, amount, user, user)
            self._revert_if_health_factor_is_broken(user)
        logger.info("%s redeemed %d of %s", user, amount, token)

    def mint_dsc(self, user, amount):
        """
        Mints DSC against the user's deposited collateral.

        Raises:
            AmountMustBeMoreThanZero: If amount is not positive
            HealthFactorBelowMinimum: If the new debt exceeds the threshold
            MintFailed: If the DSC token reports a failed mint
        """
        with self._transaction("mint_dsc"):
            self._mint_dsc(user, amount)
        logger.info("%s minted %d DSC", user, amount)

    def burn_dsc(self, user, amount):
        """
        Burns DSC to pay back the user's debt.

        The user must have approved the engine to pull amount of DSC.

        Raises:
            AmountMustBeMoreThanZero: If amount is not positive
            BurnAmountExceedsDebt: If amount exceeds the user's debt
            TransferFailed: If the DSC pull fails
        """
        with self._transaction("burn_dsc"):
            starting_health_factor = self._health_factor(user)
            self._burn_dsc(amount, on_behalf_of=user, dsc_from=user)
            # Underwater accounts may repay partially, so only monotonicity is required
            if self._health_factor(user) < starting_health_factor:
                raise HealthFactorNotImproved(f"Burning {amount} DSC lowered {user}'s health factor")
        logger.info("%s burned %d DSC", user, amount)

    def liquidate(self, liquidator, collateral, user, debt_to_cover):
        """
        Liquidates an undercollateralized account.

        The liquidator pays debt_to_cover DSC of the user's debt and receives
        the equivalent amount of collateral plus the liquidation bonus.

        Args:
            liquidator: Address paying the debt and receiving the collateral
            collateral: Address of the collateral token to seize
            user: Address of the account being liquidated
            debt_to_cover: Amount of DSC debt to pay off

        Raises:
            AmountMustBeMoreThanZero: If debt_to_cover is not positive
            HealthFactorIsFine: If the user is not liquidatable
            InsufficientCollateral: If the user holds too little of collateral
            HealthFactorNotImproved: If the user's health factor did not increase
            HealthFactorBelowMinimum: If the liquidator ends up insolvent
        """
        with self._transaction("liquidate"):
            self._require_more_than_zero(debt_to_cover)
            self._require_allowed_token(collateral)

            starting_health_factor = self._health_factor(user)
            if self._health.is_healthy(starting_health_factor):
                raise HealthFactorIsFine(
                    f"{user} has health factor {starting_health_factor}; not liquidatable"
                )

            token_amount_from_debt_covered = self._valuation.token_amount_from_usd(
                collateral, debt_to_cover
            )
            bonus_collateral = div_trunc(
                token_amount_from_debt_covered * self.config.liquidation_bonus,
                self.config.liquidation_precision,
            )
            total_collateral_to_redeem = token_amount_from_debt_covered + bonus_collateral

            self._redeem_collateral(collateral, total_collateral_to_redeem, user, liquidator)
            self._burn_dsc(debt_to_cover, on_behalf_of=user, dsc_from=liquidator)

            ending_health_factor = self._health_factor(user)
            if ending_health_factor <= starting_health_factor:
                raise HealthFactorNotImproved(
                    f"{user} health factor went from {starting_health_factor} to {ending_health_factor}"
                )
            self._revert_if_health_factor_is_broken(liquidator)
        logger.info("%s liquidated %s: covered %d DSC, seized %d of %s",
                    liquidator, user, debt_to_cover, total_collateral_to_redeem, collateral)

    # ------------------------------------------------------------------
    # Internal functions
    # ------------------------------------------------------------------

    def _require_more_than_zero(self, amount):
        if amount <= 0:
            raise AmountMustBeMoreThanZero(f"Amount must be more than zero, got {amount}")

    def _require_allowed_token(self, token):
        if token not in self._price_feeds:
            raise TokenNotAllowed(token)

    def _deposit_collateral(self, user, token, amount):
        self._require_more_than_zero(amount)
        self._require_allowed_token(token)

        self._ledger.add_collateral(user, token, amount)
        self.events.append(CollateralDeposited(user, token, amount))

        success = self._tokens[token].transfer_from(self.address, user, self.address, amount)
        if not success:
            raise TransferFailed(f"Pulling {amount} of {token} from {user} failed")

    def _mint_dsc(self, user, amount):
        self._require_more_than_zero(amount)

        self._ledger.add_debt(user, amount)
        self._revert_if_health_factor_is_broken(user)

        minted = self._dsc.mint(self.address, user, amount)
        if not minted:
            raise MintFailed(f"Minting {amount} DSC to {user} failed")

    def _redeem_collateral(self, token, amount, from_user, to_user):
        self._require_more_than_zero(amount)
        self._require_allowed_token(token)

        self._ledger.remove_collateral(from_user, token, amount)
        self.events.append(CollateralRedeemed(from_user, to_user, token, amount))

        success = self._tokens[token].transfer(self.address, to_user, amount)
        if not success:
            raise TransferFailed(f"Sending {amount} of {token} to {to_user} failed")

    def _burn_dsc(self, amount, on_behalf_of, dsc_from):
        """
        Pulls DSC from dsc_from, burns it, and reduces on_behalf_of's debt.
        """
        self._require_more_than_zero(amount)

        self._ledger.remove_debt(on_behalf_of, amount)

        success = self._dsc.transfer_from(self.address, dsc_from, self.address, amount)
        if not success:
            raise TransferFailed(f"Pulling {amount} DSC from {dsc_from} failed")
        self._dsc.burn(self.address, amount)

    def _account_information(self, user):
        total_dsc_minted = self._ledger.get_debt(user)
        collateral_value_in_usd = self.get_account_collateral_value(user)
        return total_dsc_minted, collateral_value_in_usd

    def _health_factor(self, user):
        total_dsc_minted, collateral_value_in_usd = self._account_information(user)
        return self._health.calculate(total_dsc_minted, collateral_value_in_usd)

    def _revert_if_health_factor_is_broken(self, user):
        health_factor = self._health_factor(user)
        if not self._health.is_healthy(health_factor):
            raise HealthFactorBelowMinimum(health_factor)

    # ------------------------------------------------------------------
    # View functions
    # ------------------------------------------------------------------

    def calculate_health_factor(self, total_dsc_minted, collateral_value_in_usd):
        return self._health.calculate(total_dsc_minted, collateral_value_in_usd)

    def get_health_factor(self, user):
        return self._health_factor(user)

    def get_account_information(self, user):
        """Returns (total DSC minted, collateral value in USD) for user."""
        return self._account_information(user)

    def get_account_collateral_value(self, user):
        """Total USD value of user's collateral, at usd_decimals precision."""
        return self._valuation.total_collateral_value(self._ledger.get_collateral_balances(user))

    def get_usd_value(self, token, amount):
        return self._valuation.usd_value(token, amount)

    def get_usd_value_with_decimals(self, token, amount):
        return self._valuation.usd_value_with_decimals(token, amount)

    def get_token_amount_from_usd(self, token, usd_amount, usd_decimals=None):
        return self._valuation.token_amount_from_usd(token, usd_amount, usd_decimals)

    def get_collateral_balance_of_user(self, user, token):
        return self._ledger.get_collateral(user, token)

    def get_dsc_minted(self, user):
        return self._ledger.get_debt(user)

    def get_users(self):
        return self._ledger.users()

    def get_liquidation_threshold(self):
        """Returns the threshold as a (numerator, denominator) pair."""
        return self._health.threshold

    def get_liquidation_bonus(self):
        return self.config.liquidation_bonus

    def get_liquidation_precision(self):
        return self.config.liquidation_precision

    def get_min_health_factor(self):
        return self._health.min_health_factor

    def get_usd_decimals(self):
        return self.config.usd_decimals

    def get_collateral_tokens(self):
        return list(self._price_feeds)

    def get_collateral_token_price_feed(self, token):
        feed = self._price_feeds.get(token)
        return feed.address if feed is not None else None

    def get_dsc(self):
        return self._dsc.address
