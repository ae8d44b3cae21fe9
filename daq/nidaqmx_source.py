"""National Instruments DAQmx backend.

Runs a continuous, hardware-timed analog-input task and polls it without
blocking: every read takes exactly the samples the driver already has in its
buffer. Requires the NI-DAQmx runtime and the ``nidaqmx`` package.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import nidaqmx
import numpy as np
from nidaqmx.constants import AcquisitionType, TerminalConfiguration
from nidaqmx.errors import DaqError
from nidaqmx.system import Device, System

from shared.models import ChannelInfo, DeviceInfo

from .base_source import AcquisitionStartError, ActualConfig, BaseSource

logger = logging.getLogger(__name__)


class NIDAQmxSource(BaseSource):
    """Continuous analog input from an NI device (e.g. USB-6259)."""

    PRIORITY = 10
    DEFAULT_SAMPLE_RATE = 50_000
    NOTES = "Analog inputs read as RSE voltages in ±10 V."

    @classmethod
    def device_class_name(cls) -> str:
        return "NI-DAQmx"

    def __init__(self, *, buffer_seconds: float = 1.0, voltage_range: float = 10.0) -> None:
        super().__init__()
        self._buffer_seconds = float(buffer_seconds)
        self._voltage_range = float(voltage_range)
        self._task: Optional[nidaqmx.Task] = None

    @classmethod
    def list_available_devices(cls) -> List[DeviceInfo]:
        try:
            devices = System.local().devices
            return [
                DeviceInfo(id=dev.name, name=f"{dev.name} ({dev.product_type})", vendor="National Instruments")
                for dev in devices
            ]
        except DaqError as exc:
            logger.debug("NI-DAQmx device enumeration failed: %s", exc)
            return []

    def list_available_channels(self, device_id: str) -> List[ChannelInfo]:
        device = Device(device_id)
        return [
            ChannelInfo(id=index, name=chan.name, units="V")
            for index, chan in enumerate(device.ai_physical_chans)
        ]

    def _open_impl(self, device_id: str) -> None:
        # Channels are bound to a task at configure time.
        pass

    def _close_impl(self) -> None:
        self._release_task()

    def _configure_impl(self, sample_rate: float, channels: Sequence[int], **options: Any) -> ActualConfig:
        self._release_task()
        id_to_info = {ch.id: ch for ch in self._available_channels}
        infos = [id_to_info[c] for c in channels]
        task = nidaqmx.Task()
        try:
            for info in infos:
                task.ai_channels.add_ai_voltage_chan(
                    info.name,
                    terminal_config=TerminalConfiguration.RSE,
                    min_val=-self._voltage_range,
                    max_val=self._voltage_range,
                )
            task.timing.cfg_samp_clk_timing(
                rate=sample_rate,
                sample_mode=AcquisitionType.CONTINUOUS,
                samps_per_chan=max(1, int(sample_rate * self._buffer_seconds)),
            )
            actual_rate = float(task.timing.samp_clk_rate)
        except DaqError:
            task.close()
            raise
        self._task = task
        if actual_rate != sample_rate:
            logger.info("Device coerced sample rate %.1f Hz -> %.1f Hz", sample_rate, actual_rate)
        return ActualConfig(sample_rate=actual_rate, channels=infos)

    def _start_impl(self) -> None:
        if self._task is None:
            raise AcquisitionStartError("task not configured")
        self._task.start()

    def _stop_impl(self) -> None:
        if self._task is not None:
            self._task.stop()

    def _read_impl(self) -> List[np.ndarray]:
        task = self._task
        n_channels = len(self._active_channel_ids)
        available = int(task.in_stream.avail_samp_per_chan)
        if available == 0:
            return [np.zeros(0, dtype=np.float64) for _ in range(n_channels)]
        data = task.read(number_of_samples_per_channel=available, timeout=0.0)
        if n_channels == 1:
            return [np.asarray(data, dtype=np.float64)]
        return [np.asarray(ch_data, dtype=np.float64) for ch_data in data]

    def _release_task(self) -> None:
        if self._task is None:
            return
        try:
            self._task.close()
        except DaqError as exc:
            logger.warning("Closing NI-DAQmx task failed: %s", exc)
        self._task = None
