"""
Unit tests for SpinSystem.

Tests lattice construction and energy bookkeeping:
- Periodic neighbour topology
- Initial states (random and ratio-constrained)
- Incremental Hamiltonian against full recomputation
- Spin-flip and spin-exchange moves, flip_back
"""

import io

import numpy as np
import pytest

from isinglab import (
    Configuration,
    ConfigurationError,
    ContractViolation,
    SpinSystem,
    SpinType,
)


def build(seed=0, **params):
    config = Configuration(**{"width": 4, "height": 4, **params})
    system = SpinSystem(config, rng=seed)
    system.setup()
    return system


class TestLatticeConstruction:
    """Test neighbour wiring on the torus."""

    def test_corner_neighbours(self, system):
        # up, right, below, left
        assert system.spins[0].neighbours == [12, 1, 4, 3]

    def test_interior_neighbours(self, system):
        assert system.spins[5].neighbours == [1, 6, 9, 4]

    def test_every_site_has_four_neighbours(self):
        system = build(width=5, height=3)
        for spin in system.spins:
            assert len(spin.neighbours) == 4
            assert spin.id not in spin.neighbours

    def test_single_column_excludes_self(self):
        system = build(width=1, height=4)
        for spin in system.spins:
            assert len(spin.neighbours) == 2
            assert spin.id not in spin.neighbours

    def test_ids_are_row_major(self, system):
        assert [s.id for s in system.spins] == list(range(16))

    def test_neighbour_array(self, system):
        table = system.neighbour_array()
        assert table.shape == (16, 4)
        assert list(table[0]) == [12, 1, 4, 3]

    def test_setup_without_configuration(self):
        with pytest.raises(ContractViolation):
            SpinSystem().setup()

    def test_setup_rejects_odd_constrained(self):
        system = SpinSystem(Configuration(width=3, height=3, constrained=True))
        with pytest.raises(ConfigurationError):
            system.setup()

    def test_setup_rejects_constrained_field(self):
        system = SpinSystem(Configuration(width=4, height=4, constrained=True, magnetic=1.0))
        with pytest.raises(ConfigurationError):
            system.setup()

    def test_use_before_setup(self):
        system = SpinSystem(Configuration(width=4, height=4))
        with pytest.raises(ContractViolation):
            system.flip()
        with pytest.raises(ContractViolation):
            system.magnetisation()


class TestInitialStates:

    def test_constrained_ratio(self):
        system = build(constrained=True, ratio=0.25)
        assert system.count(SpinType.DOWN) == 4
        assert system.count(SpinType.UP) == 12

    def test_constrained_ratio_one(self):
        system = build(constrained=True, ratio=1.0)
        assert system.count(SpinType.DOWN) == 16

    def test_seed_reproducible(self):
        assert np.array_equal(build(seed=5).states(), build(seed=5).states())

    def test_cosine_pattern(self):
        system = build(width=8, height=2)
        system.reset_spins_cosine(4)
        expected = [1, 1, -1, -1, 1, 1, -1, -1]
        assert list(system.lattice()[0]) == expected
        assert list(system.lattice()[1]) == expected
        assert system.hamiltonian == pytest.approx(system.total_energy())

    def test_single_phase_pattern_rejected_for_exchange(self):
        system = build(width=2, height=2, constrained=True)
        before = system.states()
        with pytest.raises(ConfigurationError, match="single phase"):
            system.reset_spins_cosine(100)
        assert np.array_equal(system.states(), before)

    def test_single_phase_pattern_allowed_for_spin_flip(self):
        system = build(width=2, height=2)
        system.reset_spins_cosine(100)
        assert system.count(SpinType.UP) == 4

    def test_reset_spins_recomputes_energy(self, system):
        system.flip()
        system.reset_spins()
        assert system.last_flipped == []
        assert system.hamiltonian == pytest.approx(system.total_energy())


class TestEnergy:
    """Test the energy model and incremental bookkeeping."""

    def test_aligned_lattice_energy(self):
        system = build()
        system.reset_spins_cosine(1000)  # all UP
        assert system.hamiltonian == pytest.approx(-32.0)
        assert system.total_energy() == pytest.approx(-32.0)

    def test_aligned_lattice_with_field(self):
        system = build(magnetic=0.5)
        system.reset_spins_cosine(1000)
        assert system.hamiltonian == pytest.approx(-48.0)
        assert system.total_energy() == pytest.approx(-48.0)

    def test_local_energy_of_aligned_spin(self):
        system = build()
        system.reset_spins_cosine(1000)
        assert system.local_energy(system.spins[0]) == pytest.approx(-4.0)

    def test_constrained_coupling_only_unlike(self):
        system = build(constrained=True)
        assert system.coupling(SpinType.UP, SpinType.UP) == 0.0
        assert system.coupling(SpinType.UP, SpinType.DOWN) == 1.0

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_initial_hamiltonian_matches_recomputation(self, seed):
        system = build(seed=seed, width=6, height=5, magnetic=0.3, interaction=0.7)
        assert system.hamiltonian == pytest.approx(system.total_energy())

    def test_incremental_updates_track_energy(self):
        system = build(seed=3, width=6, height=6, magnetic=-0.4)
        for _ in range(500):
            system.flip()
        assert system.hamiltonian == pytest.approx(system.total_energy())

    def test_exchange_updates_track_energy(self):
        system = build(seed=3, width=6, height=6, constrained=True)
        for _ in range(500):
            system.flip()
        assert system.hamiltonian == pytest.approx(system.total_energy())

    def test_reset_parameters_uses_new_coupling(self, system):
        system.reset_parameters(system.config.replace(interaction=-2.0))
        assert system.interaction == -2.0
        assert system.hamiltonian == pytest.approx(system.total_energy())

    def test_reset_parameters_rejects_new_size(self, system):
        with pytest.raises(ConfigurationError):
            system.reset_parameters(system.config.replace(width=8))


class TestMoves:

    @pytest.mark.parametrize("constrained", [False, True])
    def test_flip_back_restores_energy_and_states(self, constrained):
        system = build(seed=9, width=6, height=6, constrained=constrained)
        for _ in range(200):
            energy = system.hamiltonian
            states = system.states()
            system.flip()
            system.flip_back()
            assert system.hamiltonian == pytest.approx(energy)
            assert np.array_equal(system.states(), states)

    def test_single_flip_records_one_spin(self, system):
        before = system.states()
        system.flip()
        assert len(system.last_flipped) == 1
        changed = np.flatnonzero(system.states() != before)
        assert list(changed) == system.last_flipped

    def test_exchange_swaps_unlike_neighbours(self):
        system = build(seed=4, width=6, height=6, constrained=True)
        for _ in range(50):
            before = system.states()
            system.flip()
            a, b = system.last_flipped
            assert b in system.spins[a].neighbours
            assert before[a] != before[b]
            after = system.states()
            assert after[a] == before[b]
            assert after[b] == before[a]

    def test_exchange_conserves_up_count(self):
        system = build(seed=11, width=8, height=8, constrained=True, ratio=0.3)
        n_up = system.count(SpinType.UP)
        for i in range(400):
            system.flip()
            if i % 2:
                system.flip_back()
            assert system.count(SpinType.UP) == n_up

    def test_flip_back_without_flip(self, system):
        with pytest.raises(ContractViolation):
            system.flip_back()

    def test_second_flip_back_raises(self, system):
        system.flip()
        system.flip_back()
        with pytest.raises(ContractViolation):
            system.flip_back()

    def test_exchange_on_uniform_lattice_raises(self):
        system = build(constrained=True, ratio=0.0)
        with pytest.raises(ContractViolation):
            system.flip()


class TestObservables:

    def test_magnetisation_is_mean_state(self, system):
        assert system.magnetisation() == pytest.approx(system.states().mean())
        assert -1.0 <= system.magnetisation() <= 1.0

    def test_states_is_a_copy(self, system):
        states = system.states()
        states[:] = 0
        assert set(system.states()) <= {-1, 1}

    def test_string_rendering(self):
        system = build(width=2, height=2)
        for spin, state in zip(system.spins, [1, -1, -1, 1]):
            spin.state = SpinType(state)
        assert str(system) == "+ -\n- +\n"
        stream = io.StringIO()
        system.print(stream)
        assert stream.getvalue() == "+ -\n- +\n"

    def test_distance(self, system):
        assert system.distance(system.spins[0], system.spins[3]) == pytest.approx(1.0)
        assert system.distance(system.spins[0], system.spins[10]) == pytest.approx(np.sqrt(8))
