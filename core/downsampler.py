"""Windowed block-average reduction of raw sample histories.

The most recent `window` samples of a channel are split into fixed-size
groups and each group is replaced by its mean, so the number of display
points stays near `budget` no matter how long the window or how fast the
acquisition rate. Group boundaries are aligned to multiples of the group
size from the start of the history, which keeps points from jittering as new
samples arrive.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np


def window_length(plot_time: float, sample_rate: float) -> int:
    """Number of raw samples covered by a time window of `plot_time` seconds."""
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    return max(0, int(round(plot_time * sample_rate)))


def group_size(window: int, budget: int) -> int:
    if budget < 1:
        raise ValueError("budget must be at least 1")
    return max(1, int(window) // int(budget))


def first_index(length: int, window: int, group: int) -> int:
    """Start of the visible suffix, rounded down to a group boundary."""
    return max(0, int(length) - int(window)) // group * group


def downsample(
    values: np.ndarray,
    window: int,
    budget: int,
    sample_rate: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Reduce the visible window of `values` to averaged points.

    Parameters
    ----------
    values : np.ndarray
        Full 1D history of one channel, oldest sample first.
    window : int
        Visible window length in samples.
    budget : int
        Target number of output points.
    sample_rate : float
        Nominal samples per second, used to place points in time.

    Returns
    -------
    (times, means) : tuple[np.ndarray, np.ndarray]
        Times are negative seconds relative to the newest sample and strictly
        increasing. A trailing partial group is dropped.
    """
    if window < 0:
        raise ValueError("window must be non-negative")
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    data = np.asarray(values, dtype=np.float64).reshape(-1)
    group = group_size(window, budget)
    suffix = data[first_index(data.size, window, group):]
    n_groups = suffix.size // group
    if n_groups == 0:
        return np.zeros(0, dtype=np.float64), np.zeros(0, dtype=np.float64)

    means = suffix[: n_groups * group].reshape(n_groups, group).mean(axis=1)
    times = (np.arange(n_groups, dtype=np.float64) * group - suffix.size) / float(sample_rate)
    return times, means


__all__ = ["downsample", "first_index", "group_size", "window_length"]
