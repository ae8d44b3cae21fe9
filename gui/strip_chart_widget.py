"""StripChartWidget - live strip chart driven by a StripChartController.

The widget only gathers input (hover, wheel, vertical drag, keys) into a
`FrameInput` and hands each frame produced by the controller to a
`PlotSink`. All zoom/pan arithmetic lives in the controller.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import pyqtgraph as pg
from PySide6 import QtCore, QtGui, QtWidgets

from core.controller import StripChartController
from shared.app_settings import AppSettings, AppSettingsStore
from shared.models import FrameInput

from .plot_sink import FormattedAxisItem, PlotSink

logger = logging.getLogger(__name__)

# Qt reports 120 units per wheel notch; one notch is treated as 15 scroll points.
_WHEEL_UNITS_PER_POINT = 8.0


class InputViewBox(pg.ViewBox):
    """ViewBox that records wheel, drag and hover instead of changing its own range."""

    def __init__(self, *args, **kwargs) -> None:
        kwargs.setdefault("enableMenu", False)
        super().__init__(*args, **kwargs)
        self.setMouseEnabled(x=False, y=False)
        self.hovered = False
        self.scroll_delta = 0.0
        self.drag_delta = 0.0

    def take_input(self) -> tuple[float, float]:
        scroll, drag = self.scroll_delta, self.drag_delta
        self.scroll_delta = 0.0
        self.drag_delta = 0.0
        return scroll, drag

    def hoverEvent(self, ev) -> None:  # type: ignore[override]
        self.hovered = not ev.isExit()

    def wheelEvent(self, ev, axis=None) -> None:  # type: ignore[override]
        self.scroll_delta += ev.delta() / _WHEEL_UNITS_PER_POINT
        ev.accept()

    def mouseDragEvent(self, ev, axis=None) -> None:  # type: ignore[override]
        if ev.button() != QtCore.Qt.MouseButton.LeftButton:
            ev.ignore()
            return
        ev.accept()
        current = self.mapToView(ev.pos()).y()
        previous = self.mapToView(ev.lastPos()).y()
        self.drag_delta += current - previous


class StripChartWidget(QtWidgets.QWidget):
    """
    Scrolling multichannel plot.

    Keys: digits select the active channel, Space held while scrolling
    rescales the time window, ``S`` (or the Start/Stop button) toggles
    acquisition.
    """

    runningChanged = QtCore.Signal(bool)
    faultRaised = QtCore.Signal(str)

    def __init__(
        self,
        controller: StripChartController,
        *,
        refresh_hz: float = 60.0,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._modifier_down = False
        self._pending_select: Optional[int] = None
        self._pending_toggle = False
        self._last_running = controller.running
        self._last_fault: Optional[str] = None
        self._build_ui()
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)

        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self._on_tick)
        self.set_refresh_hz(refresh_hz)
        self._timer.start()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        controls = QtWidgets.QHBoxLayout()
        controls.setContentsMargins(6, 4, 6, 0)
        self.run_button = QtWidgets.QPushButton(self._run_label(self._last_running))
        self.run_button.setFocusPolicy(QtCore.Qt.FocusPolicy.NoFocus)
        self.run_button.clicked.connect(lambda _checked=False: self.request_toggle())
        controls.addWidget(self.run_button)
        self.status_label = QtWidgets.QLabel("")
        self.status_label.setStyleSheet("color: rgb(178, 34, 34);")
        controls.addWidget(self.status_label, 1)
        layout.addLayout(controls)
        self.runningChanged.connect(self._show_running)
        self.faultRaised.connect(self._show_fault)

        self._view_box = InputViewBox()
        self._time_axis = FormattedAxisItem("bottom")
        self._amplitude_axis = FormattedAxisItem("left")
        self.plot_widget = pg.PlotWidget(
            viewBox=self._view_box,
            enableMenu=False,
            axisItems={"bottom": self._time_axis, "left": self._amplitude_axis},
        )
        try:
            self.plot_widget.hideButtons()
        except Exception as exc:
            logger.debug("Failed to hide plot buttons: %s", exc)
        self.plot_widget.setMenuEnabled(False)
        self.plot_widget.setBackground(QtGui.QColor(211, 230, 204))
        plot_item = self.plot_widget.getPlotItem()
        plot_item.showGrid(x=True, y=True, alpha=0.4)
        plot_item.vb.setBorder(pg.mkPen((0, 0, 139)))
        layout.addWidget(self.plot_widget)

        self._sink = PlotSink(plot_item, self._time_axis, self._amplitude_axis)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def controller(self) -> StripChartController:
        return self._controller

    @property
    def sink(self) -> PlotSink:
        return self._sink

    def set_refresh_hz(self, hz: float) -> None:
        self._timer.setInterval(max(1, int(round(1000.0 / max(float(hz), 1.0)))))

    def bind_settings(self, store: AppSettingsStore) -> Callable[[], None]:
        """Follow refresh-rate changes published by `store`; returns the unsubscribe callback."""

        def apply(settings: AppSettings) -> None:
            self.set_refresh_hz(settings.refresh_hz)

        return store.subscribe(apply)

    def request_toggle(self) -> None:
        self._pending_toggle = True

    @staticmethod
    def _run_label(running: bool) -> str:
        return "Stop" if running else "Start"

    def _show_running(self, running: bool) -> None:
        self.run_button.setText(self._run_label(running))
        if running:
            self.status_label.clear()

    def _show_fault(self, message: str) -> None:
        self.status_label.setText(f"Acquisition stopped: {message}")

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:  # type: ignore[override]
        key = int(event.key())
        if key == int(QtCore.Qt.Key.Key_Space):
            self._modifier_down = True
        elif int(QtCore.Qt.Key.Key_0) <= key <= int(QtCore.Qt.Key.Key_9) and not event.isAutoRepeat():
            self._pending_select = key - int(QtCore.Qt.Key.Key_0)
        elif key == int(QtCore.Qt.Key.Key_S) and not event.isAutoRepeat():
            self._pending_toggle = True
        else:
            super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QtGui.QKeyEvent) -> None:  # type: ignore[override]
        if int(event.key()) == int(QtCore.Qt.Key.Key_Space) and not event.isAutoRepeat():
            self._modifier_down = False
        else:
            super().keyReleaseEvent(event)

    def focusOutEvent(self, event: QtGui.QFocusEvent) -> None:  # type: ignore[override]
        self._modifier_down = False
        super().focusOutEvent(event)

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def collect_input(self) -> FrameInput:
        scroll, drag = self._view_box.take_input()
        frame_input = FrameInput(
            hovered=self._view_box.hovered,
            scroll_delta=scroll,
            modifier_down=self._modifier_down,
            drag_delta=drag,
            select_channel=self._pending_select,
            toggle_running=self._pending_toggle,
        )
        self._pending_select = None
        self._pending_toggle = False
        return frame_input

    def _on_tick(self) -> None:
        frame_input = self.collect_input()
        if frame_input.is_idle and not self._controller.needs_redraw:
            return
        frame = self._controller.tick(frame_input)
        self._sink.submit(frame)
        if frame.running != self._last_running:
            self._last_running = frame.running
            self.runningChanged.emit(frame.running)
        if frame.fault and frame.fault != self._last_fault:
            self.faultRaised.emit(frame.fault)
        self._last_fault = frame.fault


__all__ = ["InputViewBox", "StripChartWidget"]
