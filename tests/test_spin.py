"""
Unit tests for Spin and SpinType.
"""

from isinglab.core.spin import Spin, SpinType


def make_star():
    """Spin 0 (UP) with neighbours 1 (UP), 2 (DOWN), 3 (DOWN)."""
    spins = [Spin(0, SpinType.UP), Spin(1, SpinType.UP),
             Spin(2, SpinType.DOWN), Spin(3, SpinType.DOWN)]
    spins[0].neighbours = [1, 2, 3]
    return spins


class TestSpinType:

    def test_values_are_signs(self):
        assert int(SpinType.UP) == 1
        assert int(SpinType.DOWN) == -1

    def test_flipped(self):
        assert SpinType.UP.flipped() is SpinType.DOWN
        assert SpinType.DOWN.flipped() is SpinType.UP


class TestSpin:

    def test_flip_toggles_state(self):
        spin = Spin(7, SpinType.UP)
        spin.flip()
        assert spin.state is SpinType.DOWN
        spin.flip()
        assert spin.state is SpinType.UP
        assert spin.id == 7

    def test_num(self):
        spins = make_star()
        assert spins[0].num(SpinType.UP, spins) == 1
        assert spins[0].num(SpinType.DOWN, spins) == 2

    def test_num_signed_positive_for_own_state(self):
        spins = make_star()
        assert spins[0].num_signed(SpinType.UP, spins) == 1
        assert spins[0].num_signed(SpinType.DOWN, spins) == -2

    def test_num_signed_after_flip(self):
        spins = make_star()
        spins[0].flip()
        assert spins[0].num_signed(SpinType.UP, spins) == -1
        assert spins[0].num_signed(SpinType.DOWN, spins) == 2

    def test_num_opposite(self):
        spins = make_star()
        assert spins[0].num_opposite(spins) == 2

    def test_iteration_over_neighbours(self):
        spins = make_star()
        assert list(spins[0]) == [1, 2, 3]
        assert len(spins[0]) == 3
