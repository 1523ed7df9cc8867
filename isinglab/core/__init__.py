"""Lattice engine and Monte Carlo driver."""

from .errors import IsingError, ConfigurationError, ContractViolation
from .config import Configuration
from .spin import Spin, SpinType
from .histogram import Histogram
from .spin_system import SpinSystem
from .control import RunControl, Snapshot
from .monte_carlo import MonteCarloHost

__all__ = [
    "IsingError", "ConfigurationError", "ContractViolation", "Configuration",
    "Spin", "SpinType", "Histogram", "SpinSystem", "RunControl", "Snapshot",
    "MonteCarloHost",
]
