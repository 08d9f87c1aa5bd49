"""
Protocol wiring for the DSC model.

This module combines the individual components into a complete deployment:
price feeds, collateral tokens, the DSC token and the engine, with the DSC
mint authority handed to the engine. Tests and simulations start from here.
"""

from __future__ import annotations

import logging

from .config import ProtocolConfig
from .dsc_engine import DSCEngine
from .dsc_token import DecentralizedStableCoin
from .erc20 import ERC20Token
from .interfaces import make_address
from .price_feed import MockV3Aggregator

logger = logging.getLogger(__name__)


class StablecoinProtocol:
    """
    Complete DSC deployment built from a ProtocolConfig.
    """

    def __init__(self, config: ProtocolConfig | None = None, deployer: str = "deployer"):
        self.config = config or ProtocolConfig()
        self.deployer = make_address(deployer)

        # Collateral tokens and their USD price feeds, in config order
        self.tokens: dict[str, ERC20Token] = {}
        self.price_feeds: dict[str, MockV3Aggregator] = {}
        for collateral in self.config.collateral:
            self.tokens[collateral.symbol] = ERC20Token(
                f"Wrapped {collateral.symbol[1:] or collateral.symbol}",
                collateral.symbol,
                collateral.decimals,
            )
            self.price_feeds[collateral.symbol] = MockV3Aggregator(
                collateral.oracle_decimals,
                collateral.initial_price * 10**collateral.oracle_decimals,
                description=f"{collateral.symbol} / USD",
            )

        self.dsc = DecentralizedStableCoin(self.deployer, self.config.dsc_decimals)
        self.engine = DSCEngine(
            list(self.tokens.values()),
            list(self.price_feeds.values()),
            self.dsc,
            self.config.engine,
        )
        self.dsc.transfer_ownership(self.deployer, self.engine.address)

        logger.info(
            "Deployed DSC engine %s with collateral %s",
            self.engine.address,
            ", ".join(self.tokens),
        )

    def token_address(self, symbol: str) -> str:
        return self.tokens[symbol].address

    def set_price(self, symbol: str, dollars: float) -> None:
        """Sets the USD price of a collateral asset."""
        self.price_feeds[symbol].set_usd_price(dollars)

    def fund(self, user: str, symbol: str, amount: int) -> None:
        """Gives user amount of a collateral token and approves the engine to pull it."""
        token = self.tokens[symbol]
        token.faucet(user, amount)
        token.approve(user, self.engine.address, token.allowance(user, self.engine.address) + amount)

    def approve_dsc(self, user: str, amount: int) -> None:
        """Approves the engine to pull amount DSC from user."""
        self.dsc.approve(user, self.engine.address, amount)

    def total_collateral_value(self) -> int:
        """USD value of all collateral held by the engine."""
        total = 0
        for token in self.tokens.values():
            total += self.engine.get_usd_value(token.address, token.balance_of(self.engine.address))
        return total

    def total_dsc_value(self) -> int:
        """DSC total supply expressed at the engine's USD precision."""
        usd_decimals = self.engine.get_usd_decimals()
        dsc_decimals = self.dsc.decimals()
        return self.dsc.total_supply * 10**usd_decimals // 10**dsc_decimals
