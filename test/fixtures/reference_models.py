"""
Reference implementations for property-based testing.

These are deliberately simple, obviously-correct implementations used to
verify the production code via differential testing. They prioritize
correctness and clarity over performance.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple


def reference_downsample(
    values: Sequence[float],
    plot_time: float,
    sample_rate: float,
    points_per_channel: int,
) -> List[Tuple[float, float]]:
    """Loop-based windowed block average, one (time, mean) pair per group.

    Walks the history group by group exactly as described for the strip
    chart: the visible suffix starts on a group boundary and a trailing
    partial group is dropped.
    """
    values = [float(v) for v in values]
    window = int(round(plot_time * sample_rate))
    group = max(1, window // points_per_channel)
    start = 0
    if len(values) > window:
        start = (len(values) - window) // group * group
    suffix = values[start:]

    points: List[Tuple[float, float]] = []
    i = 0
    while (i + 1) * group <= len(suffix):
        block = suffix[i * group:(i + 1) * group]
        t = (i * group - len(suffix)) / sample_rate
        points.append((t, sum(block) / group))
        i += 1
    return points


def reference_transform(y: float, pos: float, zoom: float, active_pos: float, active_zoom: float) -> float:
    return (y - pos) / zoom * active_zoom + active_pos
