class InvalidScaleError(ArithmeticError):
    """Raise if an amount is created or rescaled with an unusable number of decimals"""

    pass


class DivisionByZeroError(ZeroDivisionError):
    """Raise if a fixed point amount is divided by zero"""

    pass


class ScheduleUnavailable(Exception):
    """
    Raise if no epoch information is available yet, for example before genesis.
    This is an expected state and callers should render it as "no schedule"
    rather than as a failure.
    """

    pass


class ClaimError(Exception):
    """Base class for everything that stops a claim from being built or submitted"""

    pass


class InvalidProof(ClaimError):
    """Raise if a merkle proof does not fold to the published root"""

    pass


class UnsupportedNetwork(ClaimError):
    pass


class WalletNotConnected(ClaimError):
    pass


class NetworkNotInitialized(ClaimError):
    pass


class GasPriceTooLow(ClaimError):
    """Raise if the requested gas price is below the network minimum"""

    pass


class ClaimInFlightError(ClaimError):
    """Raise if a claim for the same address and epoch is already pending"""

    pass


class EmptyQueryError(Exception):
    """Raise if an API or RPC query returns no results"""

    pass


class BadConfigException(Exception):
    pass


class MissingEnvironmentVariableException(Exception):
    pass
