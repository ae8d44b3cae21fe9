"""
Property-based tests for the downsampler using Hypothesis.

The production (vectorised) downsampler is compared against the loop-based
reference model, and the structural guarantees are checked on random
histories:
1. output length equals floor(suffix_length / group_size)
2. times strictly increase and stay negative
3. same input, same output
"""
from __future__ import annotations

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from core.downsampler import downsample, first_index, group_size, window_length
from test.fixtures.reference_models import reference_downsample

history_strategy = st.lists(
    st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False),
    min_size=0,
    max_size=400,
)
plot_time_strategy = st.floats(min_value=0.001, max_value=5.0)
rate_strategy = st.sampled_from([1.0, 10.0, 50.0, 100.0, 1000.0])
budget_strategy = st.integers(min_value=1, max_value=64)


class TestDownsamplerProperties:

    @given(history=history_strategy, plot_time=plot_time_strategy, rate=rate_strategy, budget=budget_strategy)
    @settings(max_examples=200, deadline=None)
    def test_output_length(self, history, plot_time, rate, budget):
        data = np.asarray(history, dtype=np.float64)
        window = window_length(plot_time, rate)
        group = group_size(window, budget)
        suffix_len = data.size - first_index(data.size, window, group)

        times, values = downsample(data, window, budget, rate)

        assert group >= 1
        assert times.size == values.size == suffix_len // group

    @given(history=history_strategy, plot_time=plot_time_strategy, rate=rate_strategy, budget=budget_strategy)
    @settings(max_examples=200, deadline=None)
    def test_times_increasing_and_in_the_past(self, history, plot_time, rate, budget):
        data = np.asarray(history, dtype=np.float64)
        times, _ = downsample(data, window_length(plot_time, rate), budget, rate)
        if times.size:
            assert np.all(np.diff(times) > 0)
            assert times[-1] < 0

    @given(history=history_strategy, plot_time=plot_time_strategy, rate=rate_strategy, budget=budget_strategy)
    @settings(max_examples=200, deadline=None)
    def test_matches_reference_model(self, history, plot_time, rate, budget):
        data = np.asarray(history, dtype=np.float64)
        times, values = downsample(data, window_length(plot_time, rate), budget, rate)
        expected = reference_downsample(history, plot_time, rate, budget)

        assert times.size == len(expected)
        for (t, v), (et, ev) in zip(zip(times, values), expected):
            assert t == pytest.approx(et)
            assert v == pytest.approx(ev, rel=1e-9, abs=1e-6)

    @given(history=history_strategy, budget=budget_strategy)
    @settings(max_examples=50, deadline=None)
    def test_deterministic(self, history, budget):
        data = np.asarray(history, dtype=np.float64)
        a = downsample(data, 200, budget, 100.0)
        b = downsample(data, 200, budget, 100.0)
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])

    @given(
        length=st.integers(min_value=0, max_value=100_000),
        window=st.integers(min_value=0, max_value=100_000),
        budget=budget_strategy,
    )
    @settings(max_examples=200, deadline=None)
    def test_point_count_bounded_by_budget(self, length, window, budget):
        group = group_size(window, budget)
        suffix_len = length - first_index(length, window, group)
        n_points = suffix_len // group
        # The visible suffix never exceeds the window by a full group.
        assert suffix_len < window + group or length <= window
        if window >= budget:
            assert n_points <= 2 * budget
