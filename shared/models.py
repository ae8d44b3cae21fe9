from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

import numpy as np


AxisFormatter = Callable[[float, float], str]


def _freeze_array(array: np.ndarray, *, ndim: int | None = None) -> np.ndarray:
    """Return a read-only, C-contiguous float64 copy of `array`, validating dimensions."""
    arr = np.array(array, dtype=np.float64, copy=True, order="C")
    if ndim is not None and arr.ndim != ndim:
        raise ValueError(f"array must be {ndim}D, got {arr.ndim}D")
    arr.setflags(write=False)
    return arr


# ----------------------------
# Device / Channel metadata
# ----------------------------

@dataclass(frozen=True)
class DeviceInfo:
    """A discoverable acquisition device."""

    id: str
    name: str
    vendor: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChannelInfo:
    """A single input channel."""

    id: int
    name: str
    units: str = "V"


# ----------------------------
# View state
# ----------------------------

@dataclass
class ChannelViewState:
    """
    Display parameters of one channel.

    `zoom` is a half-range: the channel's visible vertical extent is
    ``[pos - zoom, pos + zoom]`` and `pos` is its vertical centre.
    Instances are mutated in place for the whole session.
    """

    name: str
    zoom: float = 1.0
    pos: float = 0.0

    def __post_init__(self) -> None:
        self.zoom = float(self.zoom)
        self.pos = float(self.pos)
        if not np.isfinite(self.zoom) or self.zoom <= 0:
            raise ValueError("zoom must be a positive finite number")
        if not np.isfinite(self.pos):
            raise ValueError("pos must be finite")

    def bounds(self) -> Tuple[float, float]:
        return self.pos - self.zoom, self.pos + self.zoom


@dataclass(frozen=True)
class ViewBounds:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


# ----------------------------
# Frame exchange with the presentation layer
# ----------------------------

@dataclass(frozen=True)
class FrameInput:
    """Input gathered by the presentation layer since the previous frame."""

    hovered: bool = False
    scroll_delta: float = 0.0
    modifier_down: bool = False
    drag_delta: float = 0.0  # already in plot vertical units
    select_channel: Optional[int] = None
    toggle_running: bool = False

    @property
    def is_idle(self) -> bool:
        return (
            self.scroll_delta == 0.0
            and self.drag_delta == 0.0
            and self.select_channel is None
            and not self.toggle_running
        )


@dataclass(frozen=True)
class Polyline:
    """A named line in plot coordinates."""

    name: str
    times: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    highlighted: bool = False

    def __post_init__(self) -> None:
        times = _freeze_array(self.times, ndim=1)
        values = _freeze_array(self.values, ndim=1)
        if times.shape != values.shape:
            raise ValueError("times and values must have the same length")
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return int(self.times.shape[0])


@dataclass(frozen=True)
class RenderFrame:
    """Everything the render sink needs to draw one frame."""

    bounds: ViewBounds
    lines: Tuple[Polyline, ...]
    time_formatter: AxisFormatter
    amplitude_formatter: AxisFormatter
    running: bool = False
    fault: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))

    @property
    def highlighted(self) -> Optional[Polyline]:
        for line in self.lines:
            if line.highlighted:
                return line
        return None


__all__ = [
    "AxisFormatter",
    "ChannelInfo",
    "ChannelViewState",
    "DeviceInfo",
    "FrameInput",
    "Polyline",
    "RenderFrame",
    "ViewBounds",
]
