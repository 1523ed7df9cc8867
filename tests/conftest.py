"""Shared fixtures for the isinglab test suite."""

import matplotlib

matplotlib.use("Agg")

import pytest

from isinglab import Configuration, MonteCarloHost, SpinSystem


@pytest.fixture
def config():
    return Configuration(width=4, height=4, interaction=1.0, magnetic=0.0,
                         temperature=1.0, print_freq=100)


@pytest.fixture
def constrained_config():
    return Configuration(width=6, height=6, interaction=1.0, magnetic=0.0,
                         temperature=1.0, constrained=True, ratio=0.5, print_freq=50)


@pytest.fixture
def system(config):
    spin_system = SpinSystem(config, rng=1234)
    spin_system.setup()
    return spin_system


@pytest.fixture
def host(config):
    mc = MonteCarloHost(config, random_seed=42)
    mc.setup()
    return mc
