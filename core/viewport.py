from __future__ import annotations

import logging
import math
from typing import List, Sequence

from shared.models import ChannelViewState, FrameInput, ViewBounds

from .downsampler import group_size, window_length

logger = logging.getLogger(__name__)

ZOOM_BASE = 1.005
LOOKAHEAD = 0.1


class ViewportController:
    """
    Zoom, pan and channel selection for the strip chart.

    Owns the global time window (`plot_time`) and the per-channel
    `ChannelViewState` list. Exactly one channel is active; its zoom/pos
    define the vertical view bounds and receive scroll/drag input.
    """

    def __init__(
        self,
        channels: Sequence[ChannelViewState],
        sample_rate: float,
        *,
        plot_time: float = 10.0,
        points_per_channel: int = 1000,
    ) -> None:
        if not channels:
            raise ValueError("at least one channel is required")
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if not math.isfinite(plot_time) or plot_time <= 0:
            raise ValueError("plot_time must be positive")
        if points_per_channel < 1:
            raise ValueError("points_per_channel must be at least 1")
        self._channels: List[ChannelViewState] = list(channels)
        self._sample_rate = float(sample_rate)
        self._plot_time = float(plot_time)
        self._points_per_channel = int(points_per_channel)
        self._active = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def channels(self) -> List[ChannelViewState]:
        return self._channels

    @property
    def active(self) -> int:
        return self._active

    @property
    def active_channel(self) -> ChannelViewState:
        return self._channels[self._active]

    @property
    def plot_time(self) -> float:
        return self._plot_time

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def points_per_channel(self) -> int:
        return self._points_per_channel

    @property
    def window_samples(self) -> int:
        return window_length(self._plot_time, self._sample_rate)

    @property
    def group_size(self) -> int:
        return group_size(self.window_samples, self._points_per_channel)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def select_channel(self, index: int) -> bool:
        """Make channel `index` active. Out-of-range indices are ignored."""
        if not 0 <= index < len(self._channels):
            logger.debug("Ignoring selection of channel %s (have %d)", index, len(self._channels))
            return False
        self._active = int(index)
        return True

    def apply_scroll(self, scroll_delta: float, modifier_down: bool) -> bool:
        """
        Rescale by ``ZOOM_BASE ** -scroll_delta``.

        With the modifier held the global time window is rescaled, otherwise
        the active channel's zoom. Returns True when something changed.
        """
        if scroll_delta == 0.0:
            return False
        if not math.isfinite(scroll_delta):
            logger.debug("Ignoring non-finite scroll delta %r", scroll_delta)
            return False
        try:
            factor = ZOOM_BASE ** (-scroll_delta)
        except OverflowError:
            factor = math.inf
        if factor <= 0.0 or not math.isfinite(factor):
            logger.debug("Ignoring scroll delta %r outside representable zoom", scroll_delta)
            return False
        if modifier_down:
            new_value = self._plot_time * factor
            # the window must stay countable in samples
            if new_value <= 0.0 or not math.isfinite(new_value * self._sample_rate):
                logger.debug("Ignoring time window of %r s", new_value)
                return False
            self._plot_time = new_value
        else:
            channel = self.active_channel
            new_value = channel.zoom * factor
            if new_value <= 0.0 or not math.isfinite(new_value):
                return False
            channel.zoom = new_value
        return True

    def apply_drag(self, drag_delta: float) -> bool:
        """Shift the active channel's centre against the drag direction."""
        if drag_delta == 0.0 or not math.isfinite(drag_delta):
            return False
        self.active_channel.pos -= drag_delta
        return True

    def update(self, frame_input: FrameInput) -> ViewBounds:
        """Apply one frame of input and return that frame's view bounds."""
        if frame_input.select_channel is not None:
            self.select_channel(frame_input.select_channel)
        if frame_input.hovered:
            self.apply_scroll(frame_input.scroll_delta, frame_input.modifier_down)
        self.apply_drag(frame_input.drag_delta)
        return self.view_bounds()

    def view_bounds(self) -> ViewBounds:
        y_min, y_max = self.active_channel.bounds()
        return ViewBounds(
            x_min=-self._plot_time,
            x_max=LOOKAHEAD * self._plot_time,
            y_min=y_min,
            y_max=y_max,
        )


__all__ = ["LOOKAHEAD", "ViewportController", "ZOOM_BASE"]
