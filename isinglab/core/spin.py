"""
Single lattice site of an Ising spin system.
"""

from enum import IntEnum
from typing import Iterator, List, Sequence


class SpinType(IntEnum):
    """Possible spin states, valued by their sign."""

    UP = 1
    DOWN = -1

    def flipped(self) -> "SpinType":
        return SpinType.DOWN if self is SpinType.UP else SpinType.UP


class Spin:
    """
    A lattice site with a stable id, a binary state and its neighbours.

    Neighbours are stored as indices into the spin list owned by the
    SpinSystem, so counting helpers take that list as an argument.
    The spin knows nothing about energies; callers do the bookkeeping.
    """

    __slots__ = ("id", "state", "neighbours")

    def __init__(self, spin_id: int, state: SpinType):
        self.id = spin_id
        self.state = SpinType(state)
        self.neighbours: List[int] = []

    def flip(self):
        """Toggle the state unconditionally."""
        self.state = self.state.flipped()

    def num(self, spin_type: SpinType, spins: Sequence["Spin"]) -> int:
        """Number of neighbours in state ``spin_type``."""
        return sum(1 for n in self.neighbours if spins[n].state == spin_type)

    def num_signed(self, spin_type: SpinType, spins: Sequence["Spin"]) -> int:
        """
        Signed number of neighbours in state ``spin_type``.

        Positive if ``spin_type`` equals this spin's own state,
        negative otherwise.
        """
        count = self.num(spin_type, spins)
        return count if spin_type == self.state else -count

    def num_opposite(self, spins: Sequence["Spin"]) -> int:
        return self.num(self.state.flipped(), spins)

    def __iter__(self) -> Iterator[int]:
        return iter(self.neighbours)

    def __len__(self) -> int:
        return len(self.neighbours)

    def __repr__(self) -> str:
        return f"Spin(id={self.id}, state={self.state.name}, neighbours={self.neighbours})"
