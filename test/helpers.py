"""
Shared setup for the DSC test modules.
"""

from stablecoin.dsc_engine import DSCEngine
from stablecoin.dsc_token import DecentralizedStableCoin
from stablecoin.interfaces import make_address
from stablecoin.price_feed import MockV3Aggregator

ETHER = 10**18
AMOUNT_COLLATERAL = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER
STARTING_ERC20_BALANCE = 10 * ETHER

USER = make_address("user")
LIQUIDATOR = make_address("liquidator")
DEPLOYER = make_address("deployer")


def deploy_engine(token, feed, dsc=None, config=None):
    """
    Deploys an engine with a single collateral token and hands it the DSC
    authority. Returns (engine, dsc).
    """
    if dsc is None:
        dsc = DecentralizedStableCoin(DEPLOYER)
    engine = DSCEngine([token], [feed], dsc, config)
    dsc.transfer_ownership(dsc.owner, engine.address)
    return engine, dsc


def eth_feed(price=2000, decimals=8):
    return MockV3Aggregator(decimals, price * 10**decimals, description="ETH / USD")


def fund(token, engine, user, amount):
    """Faucet amount of token to user and approve the engine to pull it."""
    token.faucet(user, amount)
    token.approve(user, engine.address, amount)


def state_of(engine, *tokens):
    """Everything an operation could change, for before/after comparisons."""
    ledger = engine._ledger
    return (
        ledger.snapshot(),
        list(engine.events),
        [token.snapshot() for token in tokens],
    )
