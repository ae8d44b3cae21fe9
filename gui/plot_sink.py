from __future__ import annotations

import logging
from typing import Dict, Optional

import pyqtgraph as pg
from PySide6 import QtGui

from shared.models import AxisFormatter, Polyline, RenderFrame

logger = logging.getLogger(__name__)

_PALETTE = [
    QtGui.QColor(0, 0, 139),
    QtGui.QColor(178, 34, 34),
    QtGui.QColor(34, 139, 34),
    QtGui.QColor(255, 140, 0),
    QtGui.QColor(128, 0, 128),
    QtGui.QColor(0, 128, 128),
]


class FormattedAxisItem(pg.AxisItem):
    """Axis item whose tick labels come from a ``(value, span) -> str`` callback."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._formatter: Optional[AxisFormatter] = None
        self.enableAutoSIPrefix(False)

    def set_formatter(self, formatter: Optional[AxisFormatter]) -> None:
        if formatter is self._formatter:
            return
        self._formatter = formatter
        self.picture = None
        self.update()

    def tickStrings(self, values, scale, spacing):
        if self._formatter is None:
            return super().tickStrings(values, scale, spacing)
        lo, hi = self.range
        span = float(hi) - float(lo)
        return [self._formatter(float(v) * scale, span) for v in values]


class PlotSink:
    """
    Draws `RenderFrame`s onto a pyqtgraph plot item.

    Keeps one curve per channel name. The highlighted curve is drawn wider,
    fully opaque and above the others.
    """

    def __init__(
        self,
        plot_item: pg.PlotItem,
        time_axis: FormattedAxisItem,
        amplitude_axis: FormattedAxisItem,
    ) -> None:
        self._plot_item = plot_item
        self._time_axis = time_axis
        self._amplitude_axis = amplitude_axis
        self._curves: Dict[str, pg.PlotDataItem] = {}
        self._colors: Dict[str, QtGui.QColor] = {}
        self._legend = plot_item.addLegend(offset=(-10, 10))

    @property
    def curves(self) -> Dict[str, pg.PlotDataItem]:
        return self._curves

    def submit(self, frame: RenderFrame) -> None:
        self._time_axis.set_formatter(frame.time_formatter)
        self._amplitude_axis.set_formatter(frame.amplitude_formatter)
        for line in frame.lines:
            self._draw_line(line)
        bounds = frame.bounds
        self._plot_item.setXRange(bounds.x_min, bounds.x_max, padding=0.0)
        self._plot_item.setYRange(bounds.y_min, bounds.y_max, padding=0.0)

    def _draw_line(self, line: Polyline) -> None:
        curve = self._curves.get(line.name)
        if curve is None:
            color = _PALETTE[len(self._curves) % len(_PALETTE)]
            curve = self._plot_item.plot(name=line.name, pen=pg.mkPen(color, width=2))
            self._colors[line.name] = color
            self._curves[line.name] = curve
        color = self._colors[line.name]
        width = 4.0 if line.highlighted else 2.0
        curve.setPen(pg.mkPen(color, width=width))
        curve.setZValue(1.0 if line.highlighted else 0.0)
        curve.setOpacity(1.0 if line.highlighted else 0.6)
        curve.setData(line.times, line.values)

    def clear(self) -> None:
        for curve in self._curves.values():
            try:
                self._plot_item.removeItem(curve)
            except Exception as exc:
                logger.debug("Failed to remove curve: %s", exc)
        self._curves.clear()
        self._colors.clear()
        if self._legend is not None:
            self._legend.clear()


__all__ = ["FormattedAxisItem", "PlotSink"]
