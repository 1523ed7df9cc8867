"""
Thermodynamic averages and temperature sweeps.
"""

import logging
import numpy as np
from typing import Dict, List, Optional, Sequence
from tqdm import tqdm

from ..core.config import Configuration
from ..core.monte_carlo import MonteCarloHost
from ..utils.random import RandomLike

logger = logging.getLogger(__name__)


def thermodynamic_averages(
    energies: Sequence[float],
    magnetisations: Sequence[float],
    temperature: float,
    n_spins: int,
) -> Dict[str, float]:
    """
    Averages of sampled energy and magnetisation series.

    chi = (<M^2> - <M>^2) / T
    Cv  = (<H^2> - <H>^2) / (T^2 * N^2)

    Args:
        energies: Sampled Hamiltonian values
        magnetisations: Sampled magnetisations (same length)
        temperature: Simulation temperature
        n_spins: Number of lattice sites N

    Returns:
        Dictionary with mean_energy, mean_magnetisation, susceptibility,
        heat_capacity and n_samples. Without samples every average is nan.
    """
    n_samples = len(energies)
    if n_samples == 0:
        return {
            "mean_energy": np.nan,
            "mean_magnetisation": np.nan,
            "susceptibility": np.nan,
            "heat_capacity": np.nan,
            "n_samples": 0,
        }

    energies = np.asarray(energies, dtype=float)
    magnetisations = np.asarray(magnetisations, dtype=float)

    mean_energy = energies.mean()
    mean_energy_sq = (energies ** 2).mean()
    mean_mag = magnetisations.mean()
    mean_mag_sq = (magnetisations ** 2).mean()

    T = np.float64(temperature)
    with np.errstate(all="ignore"):
        susceptibility = (mean_mag_sq - mean_mag * mean_mag) / T
        heat_capacity = (mean_energy_sq - mean_energy * mean_energy) / (T ** 2 * float(n_spins) ** 2)

    return {
        "mean_energy": float(mean_energy),
        "mean_magnetisation": float(mean_mag),
        "susceptibility": float(susceptibility),
        "heat_capacity": float(heat_capacity),
        "n_samples": n_samples,
    }


class ThermodynamicsAnalyzer:
    """
    Collects averaged observables over a range of temperatures.
    """

    def __init__(self):
        self.temperatures: List[float] = []
        self.energies: List[float] = []
        self.magnetisations: List[float] = []
        self.susceptibilities: List[float] = []
        self.heat_capacities: List[float] = []
        self.n_samples: List[int] = []

    def add_data_point(
        self,
        temperature: float,
        energy_data: Sequence[float],
        magnetisation_data: Sequence[float],
        n_spins: int,
    ) -> Dict[str, float]:
        """Average one temperature's series and store the result."""
        result = thermodynamic_averages(energy_data, magnetisation_data, temperature, n_spins)
        self.temperatures.append(float(temperature))
        self.energies.append(result["mean_energy"])
        self.magnetisations.append(result["mean_magnetisation"])
        self.susceptibilities.append(result["susceptibility"])
        self.heat_capacities.append(result["heat_capacity"])
        self.n_samples.append(result["n_samples"])
        return result

    def run_sweep(
        self,
        config: Configuration,
        temperatures: Sequence[float],
        equilibration_steps: int,
        production_steps: int,
        random_seed: RandomLike = None,
        verbose: bool = True,
        on_point=None,
    ) -> Dict[str, np.ndarray]:
        """
        Simulate each temperature in turn on one lattice.

        The lattice is set up once; for every temperature the records are
        cleared, the system is equilibrated and then sampled, so each
        point starts from the final state of the previous one.

        Args:
            config: Base configuration; its temperature is overridden
            temperatures: Temperatures to visit, in order
            equilibration_steps: Unsampled steps per temperature
            production_steps: Sampled steps per temperature
            random_seed: Seed or Generator for the whole sweep
            verbose: Show a progress bar
            on_point: Optional callback ``on_point(host, result)`` after
                each temperature, e.g. to write output files

        Returns:
            Same as ``to_arrays()``
        """
        host = MonteCarloHost(config.replace(temperature=temperatures[0]), random_seed=random_seed)
        host.setup()

        for temperature in tqdm(temperatures, desc="Temperatures", disable=not verbose):
            host.set_parameters(config.replace(temperature=float(temperature)))
            host.clear_records()
            host.equilibrate(equilibration_steps)
            host.produce(production_steps)
            result = self.add_data_point(
                temperature, host.energies, host.magnetisations, config.n_spins
            )
            logger.info("T = %g: <H> = %g, <M> = %g, chi = %g, Cv = %g",
                        temperature, result["mean_energy"], result["mean_magnetisation"],
                        result["susceptibility"], result["heat_capacity"])
            if on_point is not None:
                on_point(host, result)

        return self.to_arrays()

    def to_arrays(self) -> Dict[str, np.ndarray]:
        return {
            "temperatures": np.array(self.temperatures),
            "energies": np.array(self.energies),
            "magnetisations": np.array(self.magnetisations),
            "susceptibilities": np.array(self.susceptibilities),
            "heat_capacities": np.array(self.heat_capacities),
            "n_samples": np.array(self.n_samples),
        }

    def peak_temperature(self, quantity: str = "heat_capacity") -> Optional[float]:
        """
        Temperature at which the heat capacity or susceptibility peaks.

        A simple estimate of the transition temperature; None if no
        finite data point exists.
        """
        if quantity == "heat_capacity":
            values = np.array(self.heat_capacities, dtype=float)
        elif quantity == "susceptibility":
            values = np.array(self.susceptibilities, dtype=float)
        else:
            raise ValueError("quantity must be 'heat_capacity' or 'susceptibility'")

        finite = np.isfinite(values)
        if not finite.any():
            return None
        index = np.flatnonzero(finite)[np.argmax(values[finite])]
        return self.temperatures[index]

    def clear(self):
        for series in (self.temperatures, self.energies, self.magnetisations,
                       self.susceptibilities, self.heat_capacities, self.n_samples):
            series.clear()
