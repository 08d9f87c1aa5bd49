"""
ERC-20 Token Model.

This module simulates a standard ERC-20 token such as wETH or wBTC. It is used
for the collateral assets and as the base of the DSC token. Transfers report
failure by returning False instead of raising, so callers must check the
result.
"""

import copy
import logging

from .interfaces import is_zero_address, make_address

logger = logging.getLogger(__name__)


class ERC20Token:
    """
    Simulates an ERC-20 token contract with balances and allowances.
    """

    def __init__(self, name, symbol, decimals=18, address=None):
        self.name = name
        self.symbol = symbol
        self._decimals = decimals
        self.address = address or make_address(f"token:{symbol}")

        # Total token supply
        self.total_supply = 0

        # Mapping of addresses to token balances
        self.balances = {}

        # Mapping of (owner, spender) to approved amounts
        self.allowances = {}

    def decimals(self):
        """Returns the number of decimals used by the token."""
        return self._decimals

    def balance_of(self, account):
        """Returns the token balance of the given account."""
        return self.balances.get(account, 0)

    def allowance(self, owner, spender):
        """Returns how much spender may still pull from owner."""
        return self.allowances.get((owner, spender), 0)

    def approve(self, owner, spender, amount):
        """
        Allows spender to pull up to amount tokens from owner.

        Returns:
            True if successful
        """
        if amount < 0 or is_zero_address(spender):
            return False
        self.allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender, recipient, amount):
        """
        Transfers tokens from sender to recipient.

        Args:
            sender: Address sending the tokens
            recipient: Address receiving the tokens
            amount: Amount of tokens to transfer

        Returns:
            True if successful, False if the balance is insufficient
        """
        if amount < 0 or is_zero_address(recipient):
            return False

        sender_balance = self.balances.get(sender, 0)
        if sender_balance < amount:
            logger.debug("%s transfer of %d from %s rejected: balance %d",
                         self.symbol, amount, sender, sender_balance)
            return False

        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender, owner, recipient, amount):
        """
        Transfers tokens from owner to recipient using spender's allowance.

        Args:
            spender: Address spending the allowance
            owner: Address whose tokens are moved
            recipient: Address receiving the tokens
            amount: Amount of tokens to transfer

        Returns:
            True if successful, False if balance or allowance is insufficient
        """
        if amount < 0 or is_zero_address(recipient):
            return False

        allowed = self.allowance(owner, spender)
        if allowed < amount:
            logger.debug("%s pull of %d by %s rejected: allowance %d",
                         self.symbol, amount, spender, allowed)
            return False
        if self.balances.get(owner, 0) < amount:
            return False

        self.allowances[(owner, spender)] = allowed - amount
        self._move(owner, recipient, amount)
        return True

    def faucet(self, recipient, amount):
        """
        Mints new tokens to the recipient account, standing in for wrapping
        native assets in tests and simulations.
        """
        if amount <= 0:
            raise ValueError("Amount must be greater than zero")
        self._mint(recipient, amount)
        return True

    def snapshot(self):
        """Returns a copy of the token's mutable state."""
        return copy.deepcopy((self.total_supply, self.balances, self.allowances))

    def restore(self, state):
        """Restores state previously returned by snapshot()."""
        self.total_supply, self.balances, self.allowances = copy.deepcopy(state)

    def _mint(self, recipient, amount):
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.total_supply += amount

    def _burn(self, account, amount):
        self.balances[account] = self.balances.get(account, 0) - amount
        self.total_supply -= amount

    def _move(self, sender, recipient, amount):
        self.balances[sender] = self.balances.get(sender, 0) - amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount
