"""
Sparse histogram keyed by real-valued bins.
"""

import numpy as np
from typing import Dict, Iterator, List, Tuple


class Histogram:
    """
    Ordered mapping from a float bin key to an accumulating counter.

    Bins are created on demand and never removed (except by ``clear``);
    iteration always runs in ascending key order. Keys are compared by
    exact float equality, no tolerance is applied.
    """

    def __init__(self, bins=None):
        self._data: Dict[float, float] = {}
        if bins is not None:
            for key in bins:
                self.add_bin(key)

    def add_bin(self, key: float):
        """Create an empty bin at ``key`` if it does not exist yet."""
        self._data.setdefault(float(key), 0.0)

    def contains(self, key: float) -> bool:
        return float(key) in self._data

    __contains__ = contains

    def add_data(self, key: float, amount: float = 1.0):
        """Add ``amount`` to the bin at ``key``, creating the bin if needed."""
        key = float(key)
        self._data[key] = self._data.get(key, 0.0) + amount

    def get_data(self, key: float) -> float:
        """
        Return the counter of an existing bin.

        Raises:
            KeyError: if no bin exists at ``key``
        """
        return self._data[float(key)]

    def set_data(self, key: float, value: float):
        self._data[float(key)] = float(value)

    def reset(self):
        """Zero every counter but keep the discovered bins."""
        for key in self._data:
            self._data[key] = 0.0

    def clear(self):
        self._data.clear()

    def keys(self) -> List[float]:
        return sorted(self._data)

    def values(self) -> List[float]:
        return [self._data[key] for key in self.keys()]

    def items(self) -> List[Tuple[float, float]]:
        return [(key, self._data[key]) for key in self.keys()]

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (keys, values) as float arrays in ascending key order."""
        keys = np.array(self.keys(), dtype=float)
        values = np.array([self._data[key] for key in keys], dtype=float)
        return keys, values

    def formatted_string(self) -> str:
        """One ``key value`` line per bin, fixed-width columns."""
        return "".join(f"{key:14.6f}{value:18.10f}\n" for key, value in self.items())

    def __getitem__(self, key: float) -> float:
        return self.get_data(key)

    def __iter__(self) -> Iterator[float]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Histogram):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Histogram(n_bins={len(self)})"
