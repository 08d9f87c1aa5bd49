"""
Position Ledger Model.

Holds the per-user collateral deposits and per-user DSC debt. The ledger is
created for and mutated only by the DSC engine; everyone else reads it
through the engine's getters.
"""

import copy

from .errors import BurnAmountExceedsDebt, InsufficientCollateral


class PositionLedger:
    """
    Collateral amounts keyed by (user, token) and debt keyed by user.
    """

    def __init__(self):
        # Mapping of user -> {token -> deposited amount}
        self.collateral_deposited = {}

        # Mapping of user -> DSC minted
        self.dsc_minted = {}

    def get_collateral(self, user, token):
        """Returns the amount of token deposited by user."""
        return self.collateral_deposited.get(user, {}).get(token, 0)

    def get_collateral_balances(self, user):
        """Returns a copy of user's deposits by token."""
        return dict(self.collateral_deposited.get(user, {}))

    def get_debt(self, user):
        """Returns the DSC minted by user."""
        return self.dsc_minted.get(user, 0)

    def users(self):
        """Returns every user holding collateral or debt."""
        return sorted(set(self.collateral_deposited) | set(self.dsc_minted))

    def add_collateral(self, user, token, amount):
        deposits = self.collateral_deposited.setdefault(user, {})
        deposits[token] = deposits.get(token, 0) + amount

    def remove_collateral(self, user, token, amount):
        """
        Reduces user's deposit of token.

        Raises:
            InsufficientCollateral: If amount exceeds the deposit
        """
        current = self.get_collateral(user, token)
        if amount > current:
            raise InsufficientCollateral(
                f"Cannot remove {amount} of {token} from {user}: only {current} deposited"
            )
        self.collateral_deposited[user][token] = current - amount

    def add_debt(self, user, amount):
        self.dsc_minted[user] = self.get_debt(user) + amount

    def remove_debt(self, user, amount):
        """
        Reduces user's DSC debt.

        Raises:
            BurnAmountExceedsDebt: If amount exceeds the debt
        """
        current = self.get_debt(user)
        if amount > current:
            raise BurnAmountExceedsDebt(
                f"Cannot burn {amount} DSC for {user}: only {current} minted"
            )
        self.dsc_minted[user] = current - amount

    def snapshot(self):
        """Returns a copy of the ledger's state."""
        return copy.deepcopy((self.collateral_deposited, self.dsc_minted))

    def restore(self, state):
        """Restores state previously returned by snapshot()."""
        self.collateral_deposited, self.dsc_minted = copy.deepcopy(state)
