"""
Plotting helpers for lattice snapshots, time series and correlations.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from typing import Optional, Sequence, Tuple

from ..core.histogram import Histogram


class SpinVisualizer:
    """
    Matplotlib figures for Ising simulations.

    Every method returns the created figure; ``save_path`` writes it to
    disk and ``show`` hands it to the active backend.
    """

    def __init__(self, figsize: Tuple[int, int] = (6, 6), dpi: int = 150):
        self.figsize = figsize
        self.dpi = dpi
        self.cmap = ListedColormap(["#1f3b73", "#f2c14e"])  # DOWN, UP

    def _finish(self, fig, save_path: Optional[str], show: bool):
        fig.tight_layout()
        if save_path:
            fig.savefig(save_path, dpi=self.dpi, bbox_inches="tight")
        if show:
            plt.show()
        return fig

    def plot_lattice(
        self,
        lattice: np.ndarray,
        title: str = "Spin Configuration",
        save_path: Optional[str] = None,
        show: bool = False,
    ):
        """
        Draw a (height, width) array of +1/-1 states as a two-colour image.

        Args:
            lattice: 2D state array, e.g. ``SpinSystem.lattice()`` or
                ``Snapshot.lattice()``
            title: Plot title
            save_path: Path to save figure
            show: Call ``plt.show()``
        """
        fig, ax = plt.subplots(figsize=self.figsize)
        ax.imshow(np.asarray(lattice), cmap=self.cmap, vmin=-1, vmax=1,
                  interpolation="nearest", origin="upper")
        ax.set_title(title)
        ax.set_xticks([])
        ax.set_yticks([])
        return self._finish(fig, save_path, show)

    def plot_time_series(
        self,
        energies: Sequence[float],
        magnetisations: Sequence[float],
        print_freq: int = 1,
        save_path: Optional[str] = None,
        show: bool = False,
    ):
        """Energy and magnetisation against Monte Carlo step."""
        steps = (np.arange(len(energies)) + 1) * print_freq

        fig, (ax_h, ax_m) = plt.subplots(2, 1, sharex=True, figsize=(8, 6))
        ax_h.plot(steps, energies, "-", linewidth=1.5)
        ax_h.set_ylabel("H")
        ax_h.grid(True, alpha=0.3)

        ax_m.plot(steps, magnetisations, "-", color="tab:red", linewidth=1.5)
        ax_m.set_ylabel("M")
        ax_m.set_xlabel("MC step")
        ax_m.grid(True, alpha=0.3)
        return self._finish(fig, save_path, show)

    def plot_correlation(
        self,
        correlation: Histogram,
        save_path: Optional[str] = None,
        show: bool = False,
    ):
        """Correlation function G(r) against toroidal distance."""
        distances, values = correlation.to_arrays()

        fig, ax = plt.subplots(figsize=(8, 6))
        ax.plot(distances, values, "o-", linewidth=2, markersize=4)
        ax.set_xlabel("r")
        ax.set_ylabel("G(r)")
        ax.set_title("Spin Correlation Function")
        ax.set_ylim(-0.05, 1.05)
        ax.grid(True, alpha=0.3)
        return self._finish(fig, save_path, show)

    def plot_structure_function(
        self,
        structure: Histogram,
        save_path: Optional[str] = None,
        show: bool = False,
    ):
        """Structure function S(k) against wavevector."""
        k, values = structure.to_arrays()

        fig, ax = plt.subplots(figsize=(8, 6))
        ax.plot(k, values, "s-", color="tab:green", linewidth=2, markersize=4)
        ax.set_xlabel("k")
        ax.set_ylabel("S(k)")
        ax.set_title("Structure Function")
        ax.grid(True, alpha=0.3)
        return self._finish(fig, save_path, show)

    def plot_sweep(
        self,
        sweep: dict,
        save_path: Optional[str] = None,
        show: bool = False,
    ):
        """Four-panel plot of ``ThermodynamicsAnalyzer.to_arrays()`` output."""
        temperatures = sweep["temperatures"]
        panels = [
            ("energies", "<H>"),
            ("magnetisations", "<M>"),
            ("susceptibilities", "chi"),
            ("heat_capacities", "Cv"),
        ]

        fig, axes = plt.subplots(2, 2, figsize=(10, 8))
        for ax, (key, label) in zip(axes.flat, panels):
            ax.plot(temperatures, sweep[key], "o-", markersize=4)
            ax.set_xlabel("T")
            ax.set_ylabel(label)
            ax.grid(True, alpha=0.3)
        return self._finish(fig, save_path, show)
