"""Random number utilities."""

import numpy as np
from typing import Optional, Union

RandomLike = Optional[Union[int, np.random.Generator]]


def make_rng(seed: RandomLike = None) -> np.random.Generator:
    """
    Build an explicitly owned random generator.

    Args:
        seed: Integer seed, an existing Generator (returned as-is) or None
            for fresh OS entropy

    Returns:
        numpy Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)
