"""
Pair correlation G(r) and structure function S(k) on a periodic lattice.
"""

import numpy as np
from typing import Tuple

from .fast_ops import pair_distance_counts
from .histogram import Histogram


def toroidal_offset(delta: int, size: int) -> int:
    """Minimum-image offset along one axis of length ``size``."""
    delta = abs(delta)
    return delta if delta <= size // 2 else delta - size


def toroidal_distance(id1: int, id2: int, width: int, height: int) -> float:
    """
    Euclidean minimum-image distance between two row-major site ids.

    Args:
        id1: First site id
        id2: Second site id
        width: Lattice width
        height: Lattice height

    Returns:
        Distance in lattice units
    """
    x = toroidal_offset(id2 % width - id1 % width, width)
    y = toroidal_offset(id2 // width - id1 // width, height)
    return float(np.sqrt(x * x + y * y))


def pair_histograms(states: np.ndarray, width: int, height: int) -> Tuple[Histogram, Histogram]:
    """
    Scan all spin pairs into two histograms keyed by distance.

    Returns:
        (same_state_counts, all_pair_counts); both contain exactly the
        distances that occur on a width x height torus
    """
    states = np.ascontiguousarray(states, dtype=np.int8)
    same_counts, all_counts = pair_distance_counts(states, width, height)

    same = Histogram()
    pairs = Histogram()
    for d2 in np.nonzero(all_counts)[0]:
        # sqrt of an exact integer is deterministic, so equal d2 share a bin
        dist = float(np.sqrt(d2))
        same.add_data(dist, float(same_counts[d2]))
        pairs.add_data(dist, float(all_counts[d2]))
    return same, pairs


def correlate(states: np.ndarray, width: int, height: int) -> Histogram:
    """
    Correlation function G(r): fraction of pairs at distance r in equal states.

    Every bin is normalised by the number of pairs at that distance,
    so all values lie in [0, 1].
    """
    correlation, counter = pair_histograms(states, width, height)
    for dist in correlation:
        correlation.set_data(dist, correlation.get_data(dist) / counter.get_data(dist))
    return correlation


def wavevectors(width: int, height: int) -> np.ndarray:
    """k_n = 2*pi*n/L for n = 0..L//2 with L the longer lattice side."""
    length = max(width, height)
    return 2.0 * np.pi * np.arange(length // 2 + 1) / length


def structure_function(correlation: Histogram, width: int, height: int) -> Histogram:
    """
    Structure function S(k) from a correlation histogram.

    S(k) = 1 + (2/N) * sum_r n(r) * (2*G(r) - 1) * cos(k*r)

    where n(r) is the number of site pairs at distance r, a property of
    the lattice geometry only. With this normalisation S(0) = N * M^2.
    Bins are matched to lattice distances through r*r rounded to the
    nearest integer, so a histogram read back from a correlation file
    (keys rounded to six decimals) gives the same result.

    Args:
        correlation: Output of ``correlate``
        width: Lattice width
        height: Lattice height

    Returns:
        Histogram keyed by wavevector magnitude

    Raises:
        ValueError: if a bin is not a distance of the width x height torus
    """
    n_spins = width * height
    _, all_counts = pair_distance_counts(np.ones(n_spins, dtype=np.int8), width, height)
    distances, values = correlation.to_arrays()

    squared = np.rint(distances ** 2).astype(np.int64)
    valid = (squared < len(all_counts)) & np.isclose(np.sqrt(squared), distances, atol=1e-5)
    valid[valid] = all_counts[squared[valid]] > 0
    if not valid.all():
        raise ValueError(
            f"correlation bins {list(distances[~valid])} are not distances "
            f"of a {width}x{height} lattice"
        )
    weights = all_counts[squared].astype(float)
    spin_correlator = weights * (2.0 * values - 1.0)

    result = Histogram()
    for k in wavevectors(width, height):
        total = np.sum(spin_correlator * np.cos(k * distances))
        result.add_data(k, 1.0 + 2.0 * float(total) / n_spins)
    return result
