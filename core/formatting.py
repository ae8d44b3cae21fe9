"""Tick label formatting for the strip chart axes.

Both formatters take the tick value and the visible span of the axis
(max - min) and pick a unit from the span alone.
"""
from __future__ import annotations


def range_span(lo: float, hi: float) -> float:
    return float(hi) - float(lo)


def format_time(value: float, span: float) -> str:
    if span <= 60.0 * 2.0:
        return f"{value:.1f} secs"
    if span <= 60.0 * 60.0 * 2.0:
        return f"{int(value / 60.0)} mins"
    return f"{int(value / 60.0 / 60.0)} hrs"


def format_amplitude(value: float, span: float) -> str:
    if span <= 1e-6:
        return f"{value / 1e-9:.1f} n"
    if span <= 1e-3:
        return f"{value / 1e-6:.1f} u"
    if span <= 1.0:
        return f"{value / 1e-3:.1f} m"
    # Large spans fall back to the hour scaling of the time axis.
    return f"{int(value / 60.0 / 60.0)} hrs"


__all__ = ["format_amplitude", "format_time", "range_span"]
