"""
Misbehaving collaborators for exercising the engine's failure paths.
"""

from .dsc_token import DecentralizedStableCoin
from .erc20 import ERC20Token


class MockFailedTransfer(ERC20Token):
    """Collateral token whose outbound transfers always report failure."""

    def transfer(self, sender, recipient, amount):
        return False


class MockFailedTransferFrom(ERC20Token):
    """Collateral token whose allowance-based pulls always report failure."""

    def transfer_from(self, spender, owner, recipient, amount):
        return False


class MockFailedMintDSC(DecentralizedStableCoin):
    """DSC token that reports failure instead of minting."""

    def mint(self, caller, recipient, amount):
        self._only_owner(caller)
        return False


class MockMoreDebtDSC(DecentralizedStableCoin):
    """
    DSC token that crashes a price feed to zero whenever it burns, so a
    liquidation can never improve the target's health factor.
    """

    def __init__(self, owner, price_feed, decimals=18, address=None):
        super().__init__(owner, decimals, address)
        self.price_feed = price_feed

    def burn(self, caller, amount):
        self.price_feed.update_answer(0)
        super().burn(caller, amount)


class ReentrantToken(ERC20Token):
    """
    Collateral token that calls back into the engine while it is pulling
    tokens, the way a hostile token hook would.
    """

    def __init__(self, name, symbol, decimals=18, address=None):
        super().__init__(name, symbol, decimals, address)
        self.engine = None
        self.reentered = False

    def transfer_from(self, spender, owner, recipient, amount):
        if self.engine is not None and not self.reentered:
            self.reentered = True
            self.engine.deposit_collateral(owner, self.address, amount)
        return super().transfer_from(spender, owner, recipient, amount)
