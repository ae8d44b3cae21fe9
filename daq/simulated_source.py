# daq/simulated_source.py
from __future__ import annotations

import time
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from shared.models import ChannelInfo, DeviceInfo

from .base_source import AcquisitionReadError, AcquisitionStartError, ActualConfig, BaseSource


class SimulatedSource(BaseSource):
    """
    Generates a displacement probe and a drive voltage as smooth test signals.

    Samples become available at the configured rate as the (injectable)
    monotonic clock advances; each read returns everything that accrued since
    the previous read, capped at `max_read_seconds` worth of samples. Samples
    over the cap stay pending for the next read, so nothing is skipped.
    """

    @classmethod
    def device_class_name(cls) -> str:
        return "Simulated"

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_read_seconds: float = 0.5,
        noise_level: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__()
        if max_read_seconds <= 0:
            raise ValueError("max_read_seconds must be positive")
        self._clock = clock
        self._max_read_seconds = float(max_read_seconds)
        self._noise_level = float(noise_level)
        self._rng = np.random.default_rng(seed)
        self._t0: Optional[float] = None
        self._emitted = 0
        self._offset = 0  # sample index carried across stop/start cycles

        # Fault injection
        self.fail_on_start: Optional[Exception] = None
        self.fail_after_reads: Optional[int] = None

    # ---- Discovery ------------------------------------------------------------
    @classmethod
    def list_available_devices(cls) -> List[DeviceInfo]:
        return [DeviceInfo(id="sim0", name="Simulated probe (virtual)")]

    def list_available_channels(self, device_id: str) -> List[ChannelInfo]:
        return [
            ChannelInfo(id=0, name="Displacement", units="m"),
            ChannelInfo(id=1, name="Voltage", units="V"),
        ]

    # ------------- BaseSource overrides -------------

    def _open_impl(self, device_id: str) -> None:
        # Nothing to open for the simulator
        pass

    def _close_impl(self) -> None:
        pass

    def _configure_impl(self, sample_rate: float, channels: Sequence[int], **options: Any) -> ActualConfig:
        id_to_info = {ch.id: ch for ch in self._available_channels}
        return ActualConfig(sample_rate=sample_rate, channels=[id_to_info[c] for c in channels])

    def _start_impl(self) -> None:
        if self.fail_on_start is not None:
            raise AcquisitionStartError(str(self.fail_on_start)) from self.fail_on_start
        self._t0 = self._clock()
        self._offset += self._emitted
        self._emitted = 0

    def _stop_impl(self) -> None:
        self._t0 = None

    def _read_impl(self) -> List[np.ndarray]:
        if self.fail_after_reads is not None and self._reads >= self.fail_after_reads:
            raise AcquisitionReadError("simulated device fault")
        if self.config is None or self._t0 is None:
            raise AcquisitionReadError("simulator is not running")
        rate = self.config.sample_rate
        due = int((self._clock() - self._t0) * rate)
        cap = max(1, int(self._max_read_seconds * rate))
        n = max(0, min(due - self._emitted, cap))
        start = self._offset + self._emitted
        self._emitted += n

        t = (start + np.arange(n, dtype=np.float64)) / rate
        out: List[np.ndarray] = []
        for cid in self._active_channel_ids:
            samples = self._waveform(t, cid)
            if self._noise_level > 0 and n:
                samples = samples + self._rng.normal(0.0, self._noise_level, n)
            out.append(samples)
        return out

    @staticmethod
    def _waveform(t: np.ndarray, channel_id: int) -> np.ndarray:
        if channel_id == 0:
            # Displacement: slow sweep with a faster ripple
            return 0.5 * np.sin(2 * np.pi * 0.5 * t) + 0.05 * np.sin(2 * np.pi * 13.0 * t)
        # Drive voltage: small square-ish wave in millivolts
        return 2e-3 * np.tanh(5.0 * np.sin(2 * np.pi * 0.2 * t))
