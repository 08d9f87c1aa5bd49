"""
Decentralized Stable Coin (DSC) Token Model.

This module simulates the DecentralizedStableCoin contract, the protocol's
dollar-pegged debt token. Balances and transfers behave like any ERC-20 token;
minting and burning are reserved for a single authority, which after
deployment is the DSC engine.
"""

import logging

from .erc20 import ERC20Token
from .errors import (
    AmountMustBeMoreThanZero,
    BurnAmountExceedsBalance,
    UnauthorizedCaller,
    ZeroAddressNotAllowed,
)
from .interfaces import is_zero_address

logger = logging.getLogger(__name__)


class DecentralizedStableCoin(ERC20Token):
    """
    Simulates the DSC token contract.

    The authority is an explicit capability: every mint and burn passes the
    caller's address, which is checked against the single stored owner.
    """

    def __init__(self, owner, decimals=18, address=None):
        super().__init__("DecentralizedStableCoin", "DSC", decimals, address)
        if is_zero_address(owner):
            raise ZeroAddressNotAllowed("DSC owner cannot be the zero address")

        # Owner of the contract; the only account allowed to mint and burn
        self.owner = owner

    def transfer_ownership(self, caller, new_owner):
        """
        Hands the mint/burn authority to new_owner.
        Only callable by the current owner.
        """
        self._only_owner(caller)
        if is_zero_address(new_owner):
            raise ZeroAddressNotAllowed("New owner cannot be the zero address")

        logger.info("DSC authority transferred from %s to %s", self.owner, new_owner)
        self.owner = new_owner

    def mint(self, caller, recipient, amount):
        """
        Mints new tokens to the recipient account.
        Only callable by the owner.

        Args:
            caller: Address invoking the mint
            recipient: Address receiving the minted tokens
            amount: Amount of tokens to mint

        Returns:
            True if successful
        """
        self._only_owner(caller)
        if is_zero_address(recipient):
            raise ZeroAddressNotAllowed("Cannot mint to the zero address")
        if amount <= 0:
            raise AmountMustBeMoreThanZero("Mint amount must be more than zero")

        self._mint(recipient, amount)
        return True

    def burn(self, caller, amount):
        """
        Burns tokens held by the owner itself.
        Only callable by the owner.

        Args:
            caller: Address invoking the burn
            amount: Amount of tokens to burn
        """
        self._only_owner(caller)
        if amount <= 0:
            raise AmountMustBeMoreThanZero("Burn amount must be more than zero")

        balance = self.balances.get(caller, 0)
        if balance < amount:
            raise BurnAmountExceedsBalance(
                f"Burn amount {amount} exceeds balance {balance}"
            )

        self._burn(caller, amount)

    def _only_owner(self, caller):
        if caller != self.owner:
            raise UnauthorizedCaller(f"{caller} is not the DSC owner")
