"""
Unit tests for the windowed block-average downsampler.

These pin the windowing arithmetic that decides which raw samples are
visible and how they are grouped:
1. group_size never drops below one sample
2. the visible suffix starts on a group boundary
3. output length and time placement are exact
"""
from __future__ import annotations

import numpy as np
import pytest

from core.downsampler import downsample, first_index, group_size, window_length


class TestWindowArithmetic:

    def test_window_length_rounds(self):
        assert window_length(10.0, 50_000.0) == 500_000
        assert window_length(0.00105, 1000.0) == 1

    def test_window_length_rejects_bad_rate(self):
        with pytest.raises(ValueError):
            window_length(1.0, 0.0)

    def test_group_size_floor_and_minimum(self):
        assert group_size(500_000, 1000) == 500
        assert group_size(1999, 1000) == 1
        assert group_size(10, 1000) == 1
        assert group_size(0, 1000) == 1

    def test_group_size_rejects_empty_budget(self):
        with pytest.raises(ValueError):
            group_size(100, 0)

    def test_first_index_saturates_when_history_is_short(self):
        assert first_index(100, 500, 5) == 0
        assert first_index(500, 500, 5) == 0

    def test_first_index_aligned_to_group(self):
        # 1003 - 500 = 503 -> rounded down to a multiple of 5
        assert first_index(1003, 500, 5) == 500
        assert first_index(600_000, 500_000, 500) == 100_000


class TestDownsample:

    def test_empty_history_yields_empty_output(self):
        times, values = downsample(np.zeros(0), 1000, 100, 1000.0)
        assert times.size == 0
        assert values.size == 0

    def test_group_means(self):
        data = np.arange(12, dtype=np.float64)
        times, values = downsample(data, 12, 4, 1.0)
        # group = 3 -> [0,1,2], [3,4,5], ...
        np.testing.assert_allclose(values, [1.0, 4.0, 7.0, 10.0])
        np.testing.assert_allclose(times, [-12.0, -9.0, -6.0, -3.0])

    def test_trailing_partial_group_dropped(self):
        data = np.arange(10, dtype=np.float64)
        times, values = downsample(data, 100, 25, 1.0)
        # group = 4, suffix = whole history (10 samples) -> 2 full groups
        assert values.size == 2
        np.testing.assert_allclose(values, [1.5, 5.5])
        np.testing.assert_allclose(times, [-10.0, -6.0])

    def test_window_longer_than_history_starts_at_zero(self):
        data = np.ones(50)
        times, values = downsample(data, 1000, 1000, 100.0)
        assert values.size == 50
        assert times[0] == pytest.approx(-0.5)

    def test_newest_point_near_zero(self):
        data = np.random.default_rng(0).normal(size=5000)
        times, _ = downsample(data, 2000, 200, 1000.0)
        assert times[-1] < 0
        assert times[-1] == pytest.approx(-10 / 1000.0)

    def test_times_strictly_increasing(self):
        data = np.random.default_rng(1).normal(size=12_345)
        times, _ = downsample(data, 10_000, 300, 2000.0)
        assert np.all(np.diff(times) > 0)

    def test_deterministic(self):
        data = np.random.default_rng(2).normal(size=7777)
        first = downsample(data, 5000, 100, 500.0)
        second = downsample(data.copy(), 5000, 100, 500.0)
        np.testing.assert_array_equal(first[0], second[0])
        np.testing.assert_array_equal(first[1], second[1])

    def test_does_not_modify_input(self):
        data = np.arange(100, dtype=np.float64)
        snapshot = data.copy()
        downsample(data, 50, 10, 10.0)
        np.testing.assert_array_equal(data, snapshot)

    def test_accepts_read_only_views(self):
        data = np.arange(100, dtype=np.float64)
        data.setflags(write=False)
        _, values = downsample(data, 100, 10, 10.0)
        assert values.size == 10

    def test_scenario_long_history_fixed_budget(self):
        """12 s of 50 kHz data shown in a 10 s window with a 1000-point budget."""
        sample_rate = 50_000.0
        data = np.zeros(600_000)
        window = window_length(10.0, sample_rate)

        assert group_size(window, 1000) == 500
        times, values = downsample(data, window, 1000, sample_rate)

        assert values.size == 1000
        assert times[0] == pytest.approx(-10.0)
        assert times[-1] == pytest.approx(-0.01)
        assert np.all((times >= -10.0) & (times < 0.0))

    @pytest.mark.parametrize("bad", [(-1, 10, 1.0), (10, 10, 0.0), (10, 0, 1.0)])
    def test_invalid_arguments(self, bad):
        window, budget, rate = bad
        with pytest.raises(ValueError):
            downsample(np.ones(10), window, budget, rate)
