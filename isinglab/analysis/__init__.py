"""Analysis and post-processing modules."""

from .thermodynamics import ThermodynamicsAnalyzer, thermodynamic_averages
from .visualization import SpinVisualizer

__all__ = ["ThermodynamicsAnalyzer", "thermodynamic_averages", "SpinVisualizer"]
