"""
Unit tests for Histogram.
"""

import numpy as np
import pytest

from isinglab.core.histogram import Histogram


class TestHistogramBins:

    def test_add_data_creates_bin(self):
        hist = Histogram()
        hist.add_data(2.0)
        hist.add_data(2.0)
        assert 2.0 in hist
        assert hist.get_data(2.0) == 2.0

    def test_add_bin_keeps_existing_counter(self):
        hist = Histogram()
        hist.add_data(1.5, 3.0)
        hist.add_bin(1.5)
        assert hist[1.5] == 3.0

    def test_keys_sorted(self):
        hist = Histogram()
        for key in [3.0, 1.0, np.sqrt(2), 2.0]:
            hist.add_bin(key)
        assert hist.keys() == sorted([3.0, 1.0, np.sqrt(2), 2.0])
        assert list(hist) == hist.keys()

    def test_missing_bin_raises(self):
        with pytest.raises(KeyError):
            Histogram().get_data(1.0)

    def test_reset_keeps_bins(self):
        hist = Histogram([1.0, 2.0])
        hist.add_data(1.0, 5)
        hist.reset()
        assert len(hist) == 2
        assert hist.values() == [0.0, 0.0]

    def test_clear(self):
        hist = Histogram([1.0, 2.0])
        hist.clear()
        assert len(hist) == 0


class TestHistogramOutput:

    def test_to_arrays(self):
        hist = Histogram()
        hist.add_data(2.0, 4.0)
        hist.add_data(1.0, 3.0)
        keys, values = hist.to_arrays()
        assert np.allclose(keys, [1.0, 2.0])
        assert np.allclose(values, [3.0, 4.0])

    def test_formatted_string(self):
        hist = Histogram()
        hist.add_data(1.0, 0.5)
        assert hist.formatted_string() == "      1.000000      0.5000000000\n"

    def test_equality(self):
        a = Histogram()
        b = Histogram()
        a.add_data(1.0)
        b.add_data(1.0)
        assert a == b
        b.add_data(2.0)
        assert a != b
