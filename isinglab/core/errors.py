"""Exception types raised by the lattice engine."""


class IsingError(Exception):
    """Base class for all isinglab errors."""


class ConfigurationError(IsingError, ValueError):
    """Invalid simulation parameters, raised before any step executes."""


class ContractViolation(IsingError, RuntimeError):
    """The engine was used in a way its API does not allow."""
