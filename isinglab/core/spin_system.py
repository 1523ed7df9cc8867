"""
Core SpinSystem class: a periodic 2D Ising lattice with incremental energy.
"""

import logging
import sys
import numpy as np
from typing import List, Optional, TextIO

from .config import Configuration
from .correlation import correlate, structure_function, toroidal_distance
from .errors import ConfigurationError, ContractViolation
from .fast_ops import lattice_energy, mean_state
from .histogram import Histogram
from .spin import Spin, SpinType
from ..utils.random import RandomLike, make_rng

logger = logging.getLogger(__name__)


class SpinSystem:
    """
    Square lattice of Ising spins on a torus.

    The system owns its spins and keeps ``hamiltonian`` equal to the
    energy of the current configuration by applying local energy
    differences on every move. Two move classes are available, chosen by
    the ``constrained`` flag of the configuration:

    - single spin flip (magnetisation not conserved)
    - exchange of two unlike neighbours (Kawasaki, magnetisation conserved)
    """

    def __init__(self, config: Optional[Configuration] = None, rng: RandomLike = None):
        """
        Create an empty spin system; call ``setup()`` before use.

        Args:
            config: Simulation parameters
            rng: Seed or numpy Generator used for every random choice
        """
        self.config = config
        self.rng = make_rng(rng)

        self.spins: List[Spin] = []
        self.hamiltonian = 0.0
        self.last_flipped: List[int] = []
        self.correlation: Optional[Histogram] = None

        self._interaction = 0.0
        self._magnetic = 0.0
        self._constrained = False
        self._uniform = False

    def set_parameters(self, config: Configuration):
        self.config = config

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------

    def setup(self):
        """
        Allocate the lattice, draw initial states and wire neighbours.

        Raises:
            ContractViolation: if no configuration has been set
            ConfigurationError: if the configuration is invalid
        """
        if self.config is None:
            raise ContractViolation("no configuration set before setup()")
        self.config.validate()
        self._read_parameters()

        self.spins = [Spin(i, SpinType.UP) for i in range(self.config.n_spins)]
        self.last_flipped = []
        self.correlation = None

        self._assign_states()
        self._wire_neighbours()
        self._recompute()

        logger.info(
            "Set up %dx%d lattice (%s), initial H = %g",
            self.width, self.height,
            "spin-exchange" if self._constrained else "spin-flip",
            self.hamiltonian,
        )

    def _read_parameters(self):
        self._interaction = float(self.config.interaction)
        self._magnetic = float(self.config.magnetic)
        self._constrained = bool(self.config.constrained)

    def _assign_states(self):
        n_spins = len(self.spins)
        if not self._constrained:
            draws = self.rng.integers(0, 2, size=n_spins)
            for spin, draw in zip(self.spins, draws):
                spin.state = SpinType.UP if draw == 1 else SpinType.DOWN
            return

        for spin in self.spins:
            spin.state = SpinType.UP
        for _ in range(int(self.config.ratio * n_spins)):
            index = int(self.rng.integers(n_spins))
            while self.spins[index].state == SpinType.DOWN:
                index = int(self.rng.integers(n_spins))
            self.spins[index].state = SpinType.DOWN

    def _wire_neighbours(self):
        width, height = self.width, self.height
        for spin in self.spins:
            row, col = divmod(spin.id, width)
            candidates = (
                ((row - 1) % height) * width + col,   # up
                row * width + (col + 1) % width,      # right
                ((row + 1) % height) * width + col,   # below
                row * width + (col - 1) % width,      # left
            )
            spin.neighbours = [n for n in candidates if n != spin.id]
            logger.debug("spin %d has neighbours %s", spin.id, spin.neighbours)

    def _recompute(self):
        """Compute the Hamiltonian from scratch and refresh cached lattice facts."""
        self.hamiltonian = sum(
            self._local_energy_interaction(s) / 2 + self._local_energy_magnetic(s)
            for s in self.spins
        )
        n_up = sum(1 for s in self.spins if s.state == SpinType.UP)
        self._uniform = n_up in (0, len(self.spins))

    def _require_setup(self):
        if not self.spins:
            raise ContractViolation("spin system used before setup()")

    # ------------------------------------------------------------------
    # resets
    # ------------------------------------------------------------------

    def reset_spins(self):
        """Redraw all states in place with the rules used by ``setup()``."""
        self._require_setup()
        self._assign_states()
        self.last_flipped = []
        self.correlation = None
        self._recompute()
        logger.info("Randomised spins, H = %g", self.hamiltonian)

    def reset_spins_cosine(self, wavelength: float):
        """
        Set a stripe pattern: UP where cos(2*pi*col/wavelength) >= 0.

        Args:
            wavelength: Stripe wavelength in lattice units

        Raises:
            ConfigurationError: for a non-positive wavelength, or a pattern
                with a single phase under spin-exchange dynamics
        """
        self._require_setup()
        if wavelength <= 0:
            raise ConfigurationError(f"wavelength must be positive, got {wavelength}")
        columns = np.cos(2.0 * np.pi * np.arange(self.width) / wavelength) >= 0
        if self._constrained and (columns.all() or not columns.any()):
            raise ConfigurationError(
                f"wavelength {wavelength} gives a single phase on a lattice of width "
                f"{self.width}; spin-exchange dynamics need both spin states"
            )
        for spin in self.spins:
            up = columns[spin.id % self.width]
            spin.state = SpinType.UP if up else SpinType.DOWN
        self.last_flipped = []
        self.correlation = None
        self._recompute()
        logger.info("Applied cosine pattern (wavelength %g), H = %g", wavelength, self.hamiltonian)

    def reset_parameters(self, config: Optional[Configuration] = None):
        """
        Re-read coupling, field and mode from the configuration.

        The lattice is not reallocated; the Hamiltonian is recomputed
        for the new parameters.

        Args:
            config: Replacement configuration with the same dimensions
        """
        self._require_setup()
        if config is not None:
            if (config.width, config.height) != (self.width, self.height):
                raise ConfigurationError(
                    "reset_parameters cannot change the lattice size; call setup() instead"
                )
            self.config = config
        self.config.validate()
        self._read_parameters()
        self.last_flipped = []
        self._recompute()

    # ------------------------------------------------------------------
    # energy model
    # ------------------------------------------------------------------

    def coupling(self, type1: SpinType, type2: SpinType) -> float:
        """Effective J for a pair of states; the exchange model couples unlike states only."""
        if not self._constrained:
            return self._interaction
        return self._interaction if type1 != type2 else 0.0

    def _local_energy_interaction(self, spin: Spin) -> float:
        return (
            -self.coupling(SpinType.UP, spin.state) * spin.num_signed(SpinType.UP, self.spins)
            - self.coupling(SpinType.DOWN, spin.state) * spin.num_signed(SpinType.DOWN, self.spins)
        )

    def _local_energy_magnetic(self, spin: Spin) -> float:
        return -self._magnetic * (2.0 if spin.state == SpinType.UP else -2.0)

    def local_energy(self, spin: Spin) -> float:
        """Energy of the bonds of ``spin`` plus its field term."""
        return self._local_energy_interaction(spin) + self._local_energy_magnetic(spin)

    def total_energy(self) -> float:
        """Energy recomputed over the full lattice, independent of ``hamiltonian``."""
        self._require_setup()
        return float(lattice_energy(
            self.states(), self.neighbour_array(),
            self._interaction, self._magnetic, self._constrained,
        ))

    # ------------------------------------------------------------------
    # moves
    # ------------------------------------------------------------------

    def flip(self):
        """
        Perform one trial move and update the Hamiltonian.

        The touched spin ids are stored in ``last_flipped`` so the move
        can be undone with ``flip_back()``.
        """
        self._require_setup()
        if self._constrained:
            ids = self._pick_exchange_pair()
        else:
            ids = [int(self.rng.integers(len(self.spins)))]
        self.last_flipped = ids
        self.hamiltonian += self._flip_ids(ids)

    def _pick_exchange_pair(self) -> List[int]:
        if self._uniform:
            raise ContractViolation(
                "spin-exchange move impossible: all spins are in the same state"
            )
        n_spins = len(self.spins)
        spin = self.spins[int(self.rng.integers(n_spins))]
        while spin.num_opposite(self.spins) == 0:
            spin = self.spins[int(self.rng.integers(n_spins))]

        n_neighbours = len(spin.neighbours)
        neighbour = spin.neighbours[int(self.rng.integers(n_neighbours))]
        while self.spins[neighbour].state == spin.state:
            neighbour = spin.neighbours[int(self.rng.integers(n_neighbours))]
        return [spin.id, neighbour]

    def _flip_ids(self, ids: List[int]) -> float:
        """Flip the given spins and return the resulting energy change."""
        touched = [self.spins[i] for i in ids]
        energy_before = sum(self.local_energy(s) for s in touched)
        for s in touched:
            s.flip()
        energy_after = sum(self.local_energy(s) for s in touched)
        return energy_after - energy_before

    def flip_back(self):
        """
        Undo the pending move recorded by the last ``flip()``.

        Raises:
            ContractViolation: if there is no pending move
        """
        if not self.last_flipped:
            raise ContractViolation("Cannot flip back, since nothing has flipped yet")
        self.hamiltonian += self._flip_ids(self.last_flipped)
        self.last_flipped = []

    # ------------------------------------------------------------------
    # observables
    # ------------------------------------------------------------------

    def magnetisation(self) -> float:
        """Mean signed spin state in [-1, 1]."""
        self._require_setup()
        return float(mean_state(self.states()))

    def states(self) -> np.ndarray:
        """Row-major int8 array of spin states (+1/-1); a fresh copy."""
        return np.fromiter(
            (int(s.state) for s in self.spins), dtype=np.int8, count=len(self.spins)
        )

    def lattice(self) -> np.ndarray:
        """States as a (height, width) array."""
        return self.states().reshape(self.height, self.width)

    def neighbour_array(self) -> np.ndarray:
        """(n_spins, 4) int64 neighbour table padded with -1."""
        table = np.full((len(self.spins), 4), -1, dtype=np.int64)
        for spin in self.spins:
            table[spin.id, :len(spin.neighbours)] = spin.neighbours
        return table

    def count(self, spin_type: SpinType) -> int:
        return sum(1 for s in self.spins if s.state == spin_type)

    def distance(self, spin1: Spin, spin2: Spin) -> float:
        return toroidal_distance(spin1.id, spin2.id, self.width, self.height)

    def correlate(self) -> Histogram:
        """Compute G(r) for the current configuration and keep it as ``correlation``."""
        self._require_setup()
        logger.debug("computing correlation <Si Sj>")
        self.correlation = correlate(self.states(), self.width, self.height)
        return self.correlation

    def compute_structure_function(self, correlation: Optional[Histogram] = None) -> Histogram:
        """
        S(k) from ``correlation``, or from the latest (or a fresh) G(r).
        """
        if correlation is None:
            correlation = self.correlation if self.correlation is not None else self.correlate()
        return structure_function(correlation, self.width, self.height)

    # ------------------------------------------------------------------
    # accessors and rendering
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def n_spins(self) -> int:
        return len(self.spins)

    @property
    def interaction(self) -> float:
        return self._interaction

    @property
    def magnetic(self) -> float:
        return self._magnetic

    @property
    def constrained(self) -> bool:
        return self._constrained

    def print(self, stream: TextIO = sys.stdout):
        """Write the lattice as rows of ``+``/``-`` characters."""
        stream.write(str(self))

    def __str__(self) -> str:
        if not self.spins:
            return ""
        rows = []
        for start in range(0, len(self.spins), self.width):
            row = self.spins[start:start + self.width]
            rows.append(" ".join("-" if s.state == SpinType.DOWN else "+" for s in row))
        return "\n".join(rows) + "\n"

    def __repr__(self) -> str:
        if self.config is None:
            return "SpinSystem(unconfigured)"
        return (f"SpinSystem({self.config.width}x{self.config.height}, "
                f"constrained={self.config.constrained}, H={self.hamiltonian})")
