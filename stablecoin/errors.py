"""
Error types for the DSC protocol model.

Every error aborts the operation that raised it; the engine restores the
ledger and all token balances to their state before the call. The classes
derive from ValueError so callers that only care about "the call was
rejected" can keep catching ValueError.
"""


class StablecoinError(ValueError):
    """Base class for every rejection raised by the protocol model."""


# Validation

class AmountMustBeMoreThanZero(StablecoinError):
    """Raised when an amount argument is zero or negative."""


class ZeroAddressNotAllowed(StablecoinError):
    """Raised when the zero address is used where a real account is required."""


class TokenNotAllowed(StablecoinError):
    """Raised when a token is not registered as collateral."""

    def __init__(self, token):
        self.token = token
        super().__init__(f"Token not allowed as collateral: {token}")


class ConfigLengthMismatch(StablecoinError):
    """Raised when token and price feed lists differ in length."""


TokenAddressesAndPriceFeedAddressesMustBeSameLength = ConfigLengthMismatch


class ConfigError(StablecoinError):
    """Raised when a configuration file holds invalid values."""


class InsufficientCollateral(StablecoinError):
    """Raised when a redemption or seizure exceeds the deposited collateral."""


class BurnAmountExceedsDebt(StablecoinError):
    """Raised when more DSC is burned on behalf of a user than they minted."""


class BurnAmountExceedsBalance(StablecoinError):
    """Raised when the token authority burns more than it holds."""


class UnauthorizedCaller(StablecoinError):
    """Raised when someone other than the token authority mints or burns."""


# Transfer

class TransferFailed(StablecoinError):
    """Raised when a token adapter reports a failed transfer."""


# Solvency

class HealthFactorBelowMinimum(StablecoinError):
    """Raised when an operation would leave an account below the minimum health factor."""

    def __init__(self, health_factor):
        self.health_factor = health_factor
        super().__init__(f"Health factor below minimum: {health_factor}")


class HealthFactorIsFine(StablecoinError):
    """Raised when liquidating an account that is not liquidatable."""


class HealthFactorNotImproved(StablecoinError):
    """Raised when a liquidation does not raise the target's health factor."""


# Issuance

class MintFailed(StablecoinError):
    """Raised when the debt token reports a failed mint."""


# Concurrency

class ReentrantCall(StablecoinError):
    """Raised when an engine operation is entered while another is running."""
