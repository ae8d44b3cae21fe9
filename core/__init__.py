"""Rendering and windowing core of the strip chart."""

from .controller import AcquisitionState, StripChartController
from .downsampler import downsample, first_index, group_size, window_length
from .formatting import format_amplitude, format_time
from .transform import to_active_axis
from .viewport import ViewportController

__all__ = [
    "AcquisitionState",
    "StripChartController",
    "ViewportController",
    "downsample",
    "first_index",
    "format_amplitude",
    "format_time",
    "group_size",
    "to_active_axis",
    "window_length",
]
