"""
Economic model of the Decentralized Stable Coin (DSC) protocol.

Users lock wETH or wBTC in the DSC engine and mint a dollar-pegged token
against it, up to half of the collateral's USD value. Accounts that fall
below the minimum health factor can be liquidated for a 10% bonus.
"""

from .config import EngineConfig, ProtocolConfig, load_config
from .dsc_engine import CollateralDeposited, CollateralRedeemed, DSCEngine
from .dsc_token import DecentralizedStableCoin
from .erc20 import ERC20Token
from .errors import (
    AmountMustBeMoreThanZero,
    BurnAmountExceedsBalance,
    BurnAmountExceedsDebt,
    ConfigError,
    ConfigLengthMismatch,
    HealthFactorBelowMinimum,
    HealthFactorIsFine,
    HealthFactorNotImproved,
    InsufficientCollateral,
    MintFailed,
    ReentrantCall,
    StablecoinError,
    TokenNotAllowed,
    TransferFailed,
    UnauthorizedCaller,
    ZeroAddressNotAllowed,
)
from .position_ledger import PositionLedger
from .price_feed import MockV3Aggregator
from .protocol import StablecoinProtocol

__all__ = [
    "EngineConfig",
    "ProtocolConfig",
    "load_config",
    "CollateralDeposited",
    "CollateralRedeemed",
    "DSCEngine",
    "DecentralizedStableCoin",
    "ERC20Token",
    "PositionLedger",
    "MockV3Aggregator",
    "StablecoinProtocol",
    "StablecoinError",
    "AmountMustBeMoreThanZero",
    "BurnAmountExceedsBalance",
    "BurnAmountExceedsDebt",
    "ConfigError",
    "ConfigLengthMismatch",
    "HealthFactorBelowMinimum",
    "HealthFactorIsFine",
    "HealthFactorNotImproved",
    "InsufficientCollateral",
    "MintFailed",
    "ReentrantCall",
    "TokenNotAllowed",
    "TransferFailed",
    "UnauthorizedCaller",
    "ZeroAddressNotAllowed",
]
