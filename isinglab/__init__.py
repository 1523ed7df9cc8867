"""
isinglab: Metropolis Monte Carlo for the 2D Ising model.

Single-spin-flip and spin-exchange (Kawasaki) dynamics on a periodic
square lattice, with incremental energy bookkeeping, pair correlation
G(r), structure function S(k) and thermodynamic averages.
"""

__version__ = "0.1.0"

from . import core
from . import analysis
from . import utils

from .core import (
    Configuration,
    ConfigurationError,
    ContractViolation,
    Histogram,
    IsingError,
    MonteCarloHost,
    RunControl,
    Snapshot,
    Spin,
    SpinSystem,
    SpinType,
)
from .analysis import SpinVisualizer, ThermodynamicsAnalyzer, thermodynamic_averages

__all__ = [
    "Configuration",
    "ConfigurationError",
    "ContractViolation",
    "Histogram",
    "IsingError",
    "MonteCarloHost",
    "RunControl",
    "Snapshot",
    "Spin",
    "SpinSystem",
    "SpinType",
    "SpinVisualizer",
    "ThermodynamicsAnalyzer",
    "thermodynamic_averages",
    "core",
    "analysis",
    "utils",
]
