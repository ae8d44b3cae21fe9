__all__ = ["PlotSink", "StripChartWidget"]

from .plot_sink import PlotSink
from .strip_chart_widget import StripChartWidget
