"""
Metropolis Monte Carlo driver for a SpinSystem.
"""

import logging
import threading
import numpy as np
from typing import Any, Callable, Dict, List, Optional
from tqdm import tqdm

from .config import Configuration
from .control import RunControl, Snapshot
from .errors import ContractViolation
from .spin_system import SpinSystem
from ..utils.random import RandomLike, make_rng

logger = logging.getLogger(__name__)

Observer = Callable[[str, Dict[str, Any]], None]


def metropolis_threshold(delta_energy: float, temperature: float) -> float:
    """
    exp(-delta_energy / temperature) with IEEE semantics.

    T == 0 gives 0 for uphill moves, inf for downhill moves and nan for
    delta_energy == 0; no warnings or exceptions are raised.
    """
    with np.errstate(all="ignore"):
        return float(np.exp(-np.float64(delta_energy) / np.float64(temperature)))


class MonteCarloHost:
    """
    Runs Metropolis steps over one SpinSystem and records samples.

    Each call to ``run(steps, equilibration=False)`` appends the current
    Hamiltonian and magnetisation to ``energies`` and ``magnetisations``
    exactly once; equilibration runs record nothing.
    """

    def __init__(
        self,
        config: Configuration,
        random_seed: RandomLike = None,
        observer: Optional[Observer] = None,
        control: Optional[RunControl] = None,
    ):
        """
        Initialize the host.

        Args:
            config: Simulation parameters
            random_seed: Seed or numpy Generator shared with the spin system
            observer: Optional callback ``observer(event, payload)`` for
                per-move tracing ("accepted" / "rejected")
            control: Cancellation token; a private one is created if None
        """
        self.config = config
        self.rng = make_rng(random_seed)
        self.observer = observer
        self.control = control if control is not None else RunControl()

        self.spin_system = SpinSystem(config, rng=self.rng)
        self.energies: List[float] = []
        self.magnetisations: List[float] = []
        self.steps_done = 0

        self._lock = threading.RLock()
        self._is_setup = False

    @property
    def temperature(self) -> float:
        return self.config.temperature

    def set_parameters(self, config: Configuration):
        """Replace the configuration; takes effect on setup() or clear_records()."""
        self.config = config
        self.spin_system.set_parameters(config)

    def setup(self):
        """Build the lattice from the configuration and clear all records."""
        with self._lock:
            self._is_setup = False
            self.spin_system.set_parameters(self.config)
            self.spin_system.setup()
            if self.config.wavelength_pattern:
                self.spin_system.reset_spins_cosine(self.config.wavelength)
            self._is_setup = True
            self.clear_records()

    def reset_spins(self):
        """Redraw the lattice states, using the cosine pattern if configured."""
        self._require_setup()
        with self._lock:
            if self.config.wavelength_pattern:
                self.spin_system.reset_spins_cosine(self.config.wavelength)
            else:
                self.spin_system.reset_spins()

    def clear_records(self):
        """Empty both series and re-read the parameters without reallocating."""
        self._require_setup()
        with self._lock:
            self.energies.clear()
            self.magnetisations.clear()
            self.steps_done = 0
            self.spin_system.reset_parameters(self.config)

    def _require_setup(self):
        if not self._is_setup:
            raise ContractViolation("MonteCarloHost used before setup()")

    # ------------------------------------------------------------------
    # Metropolis dynamics
    # ------------------------------------------------------------------

    def acceptance(self, energy_old: float, energy_new: float, temperature: float) -> bool:
        """Metropolis criterion: reject if u >= exp(-(E_new - E_old)/T)."""
        threshold = metropolis_threshold(energy_new - energy_old, temperature)
        return not self.rng.random() >= threshold

    def step(self) -> bool:
        """
        One trial move followed by the acceptance test.

        Returns:
            True if the move was kept
        """
        with self._lock:
            system = self.spin_system
            energy_old = system.hamiltonian
            system.flip()
            energy_new = system.hamiltonian
            flipped = list(system.last_flipped)
            accepted = self.acceptance(energy_old, energy_new, self.temperature)
            if not accepted:
                system.flip_back()
            self.steps_done += 1

        if self.observer is not None:
            self.observer("accepted" if accepted else "rejected", {
                "step": self.steps_done,
                "spins": flipped,
                "energy_old": energy_old,
                "energy_new": energy_new,
                "hamiltonian": system.hamiltonian,
            })
        return accepted

    def run(self, steps: int, equilibration: bool = False, verbose: bool = False) -> int:
        """
        Perform ``steps`` Metropolis iterations.

        The control token is checked before every step; a pause or abort
        request ends the run early and no sample is recorded.

        Args:
            steps: Number of trial moves
            equilibration: Do not record a sample at the end
            verbose: Show a progress bar

        Returns:
            Number of steps actually performed
        """
        self._require_setup()
        done = 0
        self.control.set_running(True)
        try:
            for _ in tqdm(range(steps), desc="MC Steps", disable=not verbose, leave=False):
                if self.control.should_stop():
                    logger.info("Run interrupted after %d of %d steps", done, steps)
                    return done
                self.step()
                done += 1
        finally:
            self.control.set_running(False)

        if not equilibration:
            with self._lock:
                self.energies.append(self.spin_system.hamiltonian)
                self.magnetisations.append(self.spin_system.magnetisation())
        return done

    def equilibrate(self, steps: int, verbose: bool = False) -> int:
        """Unsampled run of ``steps`` moves."""
        logger.info("Equilibration run: %d steps at T = %g", steps, self.temperature)
        return self.run(steps, equilibration=True, verbose=verbose)

    def produce(self, steps: int, verbose: bool = False) -> int:
        """
        Production run: ``steps // print_freq`` sampled runs of ``print_freq`` moves.

        Returns:
            Number of steps actually performed
        """
        stride = self.config.print_freq
        n_samples = steps // stride
        logger.info("Production run: %d samples every %d steps at T = %g",
                    n_samples, stride, self.temperature)
        done = 0
        for _ in tqdm(range(n_samples), desc="Samples", disable=not verbose):
            performed = self.run(stride)
            done += performed
            if performed < stride:
                break
        return done

    # ------------------------------------------------------------------
    # observables
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Consistent copy of the current state for display or export."""
        self._require_setup()
        with self._lock:
            system = self.spin_system
            return Snapshot(
                steps_done=self.steps_done,
                hamiltonian=system.hamiltonian,
                magnetisation=system.magnetisation(),
                states=system.states(),
                width=system.width,
                height=system.height,
            )

    def averages(self) -> Dict[str, float]:
        """
        Averages over the recorded series.

        Returns:
            Dictionary with mean_energy, mean_magnetisation, susceptibility,
            heat_capacity and n_samples; values are nan without samples
        """
        from ..analysis.thermodynamics import thermodynamic_averages

        return thermodynamic_averages(
            self.energies, self.magnetisations, self.temperature, self.config.n_spins
        )

    def __repr__(self) -> str:
        return (f"MonteCarloHost(T={self.temperature}, "
                f"n_spins={self.config.n_spins}, samples={len(self.energies)})")
