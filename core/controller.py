from __future__ import annotations

import enum
import logging
from typing import List, Optional, Sequence

from daq.base_source import AcquisitionError, BaseSource
from shared.models import ChannelViewState, FrameInput, Polyline, RenderFrame
from shared.sample_store import SampleStore

from .downsampler import downsample
from .formatting import format_amplitude, format_time
from .transform import to_active_axis
from .viewport import ViewportController

logger = logging.getLogger(__name__)


class AcquisitionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class StripChartController:
    """
    Per-frame pipeline of the strip chart.

    Each `tick()` polls the source (Running only), appends every channel's
    chunk to the `SampleStore`, applies the frame's input to the viewport and
    returns a `RenderFrame`: one downsampled polyline per channel, remapped
    onto the active channel's vertical axis.

    A failed read is fatal for the run: the fault is recorded, the source is
    stopped and no further reads happen until an explicit `start()`.
    """

    def __init__(
        self,
        source: BaseSource,
        channels: Sequence[ChannelViewState],
        sample_rate: float,
        *,
        plot_time: float = 10.0,
        points_per_channel: int = 1000,
    ) -> None:
        self._source = source
        self._viewport = ViewportController(
            channels,
            sample_rate,
            plot_time=plot_time,
            points_per_channel=points_per_channel,
        )
        self._store = SampleStore(len(self._viewport.channels))
        self._state = AcquisitionState.IDLE
        self._fault: Optional[str] = None
        self._dirty = True

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def viewport(self) -> ViewportController:
        return self._viewport

    @property
    def store(self) -> SampleStore:
        return self._store

    @property
    def source(self) -> BaseSource:
        return self._source

    @property
    def state(self) -> AcquisitionState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is AcquisitionState.RUNNING

    @property
    def fault(self) -> Optional[str]:
        return self._fault

    @property
    def needs_redraw(self) -> bool:
        return self._dirty or self.running

    # -------------------------------------------------------------------------
    # Run control
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Idle -> Running. A start failure propagates and leaves the state unchanged."""
        if self.running:
            return
        self._source.start()
        self._state = AcquisitionState.RUNNING
        self._fault = None
        self._dirty = True
        logger.info("Acquisition running")

    def stop(self) -> None:
        """Running -> Idle. A no-op when already Idle; history is kept."""
        if not self.running:
            return
        self._source.stop()
        self._state = AcquisitionState.IDLE
        self._dirty = True
        logger.info("Acquisition stopped (%d samples per channel)", len(self._store))

    def toggle_running(self) -> bool:
        if self.running:
            self.stop()
        else:
            self.start()
        return self.running

    def reset_history(self) -> None:
        self._store.clear()
        self._dirty = True

    # -------------------------------------------------------------------------
    # Frame pipeline
    # -------------------------------------------------------------------------

    def poll(self) -> int:
        """Read and append the newest samples. Returns samples appended per channel."""
        if not self.running:
            return 0
        try:
            chunks = self._source.read_samples()
        except AcquisitionError as exc:
            self._handle_read_fault(exc)
            return 0
        appended = self._store.append(chunks)
        if appended:
            self._dirty = True
        return appended

    def tick(self, frame_input: Optional[FrameInput] = None) -> RenderFrame:
        frame_input = frame_input or FrameInput()
        self.poll()
        if frame_input.toggle_running:
            try:
                self.toggle_running()
            except AcquisitionError as exc:
                self._fault = str(exc)
                self._dirty = True
                logger.error("Could not change acquisition state: %s", exc)
        if not frame_input.is_idle:
            self._dirty = True
        self._viewport.update(frame_input)
        return self.render()

    def render(self) -> RenderFrame:
        """Build the frame from the current store and view state without mutating either."""
        viewport = self._viewport
        active = viewport.active_channel
        window = viewport.window_samples
        lines: List[Polyline] = []
        for index, channel in enumerate(viewport.channels):
            times, values = downsample(
                self._store.channel(index),
                window,
                viewport.points_per_channel,
                viewport.sample_rate,
            )
            lines.append(
                Polyline(
                    name=channel.name,
                    times=times,
                    values=to_active_axis(values, channel, active),
                    highlighted=index == viewport.active,
                )
            )
        self._dirty = False
        return RenderFrame(
            bounds=viewport.view_bounds(),
            lines=tuple(lines),
            time_formatter=format_time,
            amplitude_formatter=format_amplitude,
            running=self.running,
            fault=self._fault,
        )

    def _handle_read_fault(self, exc: Exception) -> None:
        logger.error("Acquisition read failed, stopping: %s", exc)
        self._fault = str(exc) or exc.__class__.__name__
        self._state = AcquisitionState.IDLE
        self._dirty = True
        try:
            self._source.stop()
        except AcquisitionError as stop_exc:
            logger.warning("Stopping faulted source failed: %s", stop_exc)


__all__ = ["AcquisitionState", "StripChartController"]
