"""
Simulation parameters for the lattice engine.
"""

import warnings
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict

from .errors import ConfigurationError


@dataclass(frozen=True)
class Configuration:
    """
    Read-only parameters of one Ising simulation.

    Attributes:
        width: Number of lattice columns
        height: Number of lattice rows
        interaction: Coupling constant J
        magnetic: External magnetic field B
        temperature: Temperature T (k_B = 1)
        constrained: Use spin-exchange (Kawasaki) dynamics
        ratio: Fraction of DOWN spins for constrained setups
        print_freq: Metropolis steps between two recorded samples
        wavelength_pattern: Start from a cosine stripe pattern
        wavelength: Stripe wavelength in lattice units
        file_key: Output file stem; text after the first space is ignored
    """

    width: int = 32
    height: int = 32
    interaction: float = 1.0
    magnetic: float = 0.0
    temperature: float = 2.0
    constrained: bool = False
    ratio: float = 0.5
    print_freq: int = 100
    wavelength_pattern: bool = False
    wavelength: int = 8
    file_key: str = "ising"

    @property
    def n_spins(self) -> int:
        return self.width * self.height

    @property
    def filekey_base(self) -> str:
        stripped = self.file_key.strip()
        return stripped.split(" ")[0] if stripped else "ising"

    def validate(self) -> "Configuration":
        """
        Check the parameters for consistency.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: on any invalid combination
        """
        if self.width < 1 or self.height < 1:
            raise ConfigurationError(
                f"lattice dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.print_freq < 1:
            raise ConfigurationError(f"print_freq must be >= 1, got {self.print_freq}")
        if not 0.0 <= self.ratio <= 1.0:
            raise ConfigurationError(f"ratio must lie in [0, 1], got {self.ratio}")
        if self.wavelength_pattern and self.wavelength < 1:
            raise ConfigurationError(f"wavelength must be >= 1, got {self.wavelength}")
        if self.constrained and self.n_spins % 2 != 0:
            raise ConfigurationError(
                "system size must be an even number if system is constrained"
            )
        if self.constrained and self.magnetic != 0:
            raise ConfigurationError("constrained system cannot have a magnetic field")
        return self

    def replace(self, **changes) -> "Configuration":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """Build a configuration, ignoring (with a warning) unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            warnings.warn(f"Ignoring unknown configuration keys: {unknown}")
        return cls(**{key: value for key, value in data.items() if key in known})
