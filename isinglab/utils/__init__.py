"""Utility functions and helpers."""

from .random import make_rng

__all__ = ["make_rng"]
