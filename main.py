from __future__ import annotations

import logging
import sys

import pyqtgraph as pg
from PySide6.QtWidgets import QApplication

from core import StripChartController
from daq.registry import find_source
from gui import StripChartWidget
from shared.app_settings import AppSettings, AppSettingsStore
from shared.models import ChannelViewState

WINDOW_TITLE = "Viewer"

# Must be set before any PyQtGraph widgets are created.
pg.setConfigOptions(useOpenGL=True, antialias=False)


def _apply_log_level(settings: AppSettings) -> None:
    logging.getLogger().setLevel(settings.log_level)


def window_title(running: bool, fault: str | None = None) -> str:
    if fault:
        return f"{WINDOW_TITLE} [stopped: {fault}]"
    return f"{WINDOW_TITLE} [{'running' if running else 'stopped'}]"


def main() -> int:
    store = AppSettingsStore()
    settings = store.get()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    unbind_logging = store.subscribe(_apply_log_level, replay=False)

    app = QApplication(sys.argv)
    app.setApplicationName("StripView")

    descriptor, device = find_source(settings.source_key)
    # later lookups in this session reuse the resolved backend
    store.update(source_key=descriptor.key)
    source = descriptor.create()
    source.open(device.id)
    channels = source.list_available_channels(device.id)[: len(settings.channel_names)]
    actual = source.configure(settings.sample_rate, channels=[ch.id for ch in channels])
    names = settings.channel_names[: len(channels)]

    controller = StripChartController(
        source,
        [ChannelViewState(name, zoom=settings.initial_zoom) for name in names],
        actual.sample_rate,
        plot_time=settings.plot_time,
        points_per_channel=settings.points_per_channel,
    )
    widget = StripChartWidget(controller, refresh_hz=settings.refresh_hz)
    unbind_widget = widget.bind_settings(store)
    widget.setWindowTitle(window_title(controller.running))
    widget.runningChanged.connect(lambda running: widget.setWindowTitle(window_title(running)))
    widget.faultRaised.connect(lambda message: widget.setWindowTitle(window_title(False, message)))
    widget.resize(16 * 80, 9 * 80)
    widget.show()
    try:
        return app.exec()
    finally:
        unbind_widget()
        unbind_logging()
        controller.stop()
        source.close()


if __name__ == "__main__":
    raise SystemExit(main())
