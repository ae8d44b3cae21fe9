"""
Polled acquisition sources for the strip chart.

A source is opened on a device, configured with a sample rate and a channel
subset, then started. While running, the frame loop calls `read_samples()`
once per frame and receives whatever arrived since the previous call.
Vendor exceptions never escape: they are wrapped in the `AcquisitionError`
subclasses below.

Concrete drivers fill in the `_*_impl` hooks; locking, state checks and
result normalisation live here.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Literal, Optional, Sequence

import numpy as np

from shared.models import ChannelInfo, DeviceInfo

logger = logging.getLogger(__name__)


# ----------------------------
# Errors
# ----------------------------

class AcquisitionError(RuntimeError):
    """Base class for failures reported by an acquisition source."""


class AcquisitionStartError(AcquisitionError):
    pass


class AcquisitionStopError(AcquisitionError):
    pass


class AcquisitionReadError(AcquisitionError):
    pass


@dataclass(frozen=True)
class ActualConfig:
    """Configuration achieved after a driver configures the device."""

    sample_rate: float
    channels: List[ChannelInfo]


# ----------------------------
# Base class
# ----------------------------

State = Literal["closed", "open", "running"]


class BaseSource(ABC):
    """
    Abstract base for all acquisition sources.

    Typical flow:
        devs = Driver.list_available_devices()
        source = Driver()
        source.open(devs[0].id)
        chans = source.list_available_channels(devs[0].id)
        source.configure(sample_rate=50_000, channels=[c.id for c in chans[:2]])
        source.start()
        chunks = source.read_samples()   # once per frame, never blocks
        source.stop()
        source.close()
    """

    @classmethod
    @abstractmethod
    def device_class_name(cls) -> str:
        """Label shown when listing backends."""
        raise NotImplementedError

    def __init__(self) -> None:
        self._state_lock = threading.RLock()
        self._state: State = "closed"
        self._device_id: Optional[str] = None
        self._available_channels: List[ChannelInfo] = []
        self._active_channel_ids: List[int] = []
        self.config: Optional[ActualConfig] = None

        # Diagnostics (reset at each start)
        self._reads: int = 0
        self._samples_read: int = 0

    # ------------------------
    # Device enumeration APIs
    # ------------------------

    @classmethod
    @abstractmethod
    def list_available_devices(cls) -> List[DeviceInfo]:
        """Devices this backend can open right now."""
        raise NotImplementedError

    @abstractmethod
    def list_available_channels(self, device_id: str) -> List[ChannelInfo]:
        """Analog inputs of `device_id`; ids are what `configure()` accepts."""
        raise NotImplementedError

    # ----------
    # Lifecycle
    # ----------

    def open(self, device_id: str) -> None:
        with self._state_lock:
            self._assert_state(expected=("closed",))
            self._open_impl(device_id)
            self._device_id = device_id
            self._available_channels = self.list_available_channels(device_id)
            self._active_channel_ids = [ch.id for ch in self._available_channels]
            self._state = "open"

    @abstractmethod
    def _open_impl(self, device_id: str) -> None:
        """Claim the device."""
        raise NotImplementedError

    def close(self) -> None:
        with self._state_lock:
            if self._state == "closed":
                return
            if self._state == "running":
                self.stop()
            self._close_impl()
            self._device_id = None
            self._available_channels = []
            self._active_channel_ids = []
            self.config = None
            self._state = "closed"

    @abstractmethod
    def _close_impl(self) -> None:
        """Release whatever `_open_impl` claimed."""
        raise NotImplementedError

    # -------------
    # Configuration
    # -------------

    def configure(
        self,
        sample_rate: float,
        channels: Optional[Sequence[int]] = None,
        **options: Any,
    ) -> ActualConfig:
        """
        Select channels and sample rate; all channels when `channels` is empty.

        Allowed only while open (not running). Drivers may coerce the rate,
        so callers should use the returned `ActualConfig`.
        """
        with self._state_lock:
            self._assert_state(expected=("open",))
            if sample_rate <= 0:
                raise ValueError("sample_rate must be positive")
            if channels is None or len(channels) == 0:
                channels = [ch.id for ch in self._available_channels]
            self._set_active_channels(channels)
            actual = self._configure_impl(
                sample_rate=float(sample_rate),
                channels=list(self._active_channel_ids),
                **options,
            )
            self.config = actual
            return actual

    @abstractmethod
    def _configure_impl(
        self,
        sample_rate: float,
        channels: Sequence[int],
        **options: Any,
    ) -> ActualConfig:
        """Driver-specific configuration. Should not start acquisition."""
        raise NotImplementedError

    # ---- Run control ----

    def start(self) -> None:
        """Begin acquisition. Raises AcquisitionStartError if the device refuses."""
        with self._state_lock:
            if self._state != "open":
                raise AcquisitionStartError(f"Cannot start from state {self._state!r}.")
            if self.config is None:
                raise AcquisitionStartError("configure() must be called before start().")
            self._reads = 0
            self._samples_read = 0
            try:
                self._start_impl()
            except AcquisitionStartError:
                raise
            except Exception as exc:
                raise AcquisitionStartError(str(exc)) from exc
            self._state = "running"
            logger.info("%s started at %.1f Hz", self.device_class_name(), self.config.sample_rate)

    @abstractmethod
    def _start_impl(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        """Stop acquisition; safe to call in any state."""
        with self._state_lock:
            if self._state != "running":
                return
            try:
                self._stop_impl()
            except AcquisitionStopError:
                raise
            except Exception as exc:
                raise AcquisitionStopError(str(exc)) from exc
            self._state = "open"
            logger.info("%s stopped after %d reads", self.device_class_name(), self._reads)

    @abstractmethod
    def _stop_impl(self) -> None:
        raise NotImplementedError

    def read_samples(self) -> List[np.ndarray]:
        """
        Return the samples that arrived since the previous call.

        One 1D float64 array per active channel, in channel order; arrays may
        be empty. Never blocks waiting for data.
        """
        with self._state_lock:
            if self._state != "running":
                raise AcquisitionReadError(f"Cannot read from state {self._state!r}.")
            try:
                raw = self._read_impl()
            except AcquisitionReadError:
                raise
            except Exception as exc:
                raise AcquisitionReadError(str(exc)) from exc
            chunks = [np.asarray(chunk, dtype=np.float64).reshape(-1) for chunk in raw]
            if len(chunks) != len(self._active_channel_ids):
                raise AcquisitionReadError(
                    f"driver returned {len(chunks)} channels, expected {len(self._active_channel_ids)}"
                )
            self._reads += 1
            self._samples_read += chunks[0].size if chunks else 0
            return chunks

    @abstractmethod
    def _read_impl(self) -> Sequence[np.ndarray]:
        """Driver-specific non-blocking read, one array per active channel."""
        raise NotImplementedError

    # -----------------
    # Channel selection
    # -----------------

    def _set_active_channels(self, channel_ids: Sequence[int]) -> None:
        available_ids = {c.id for c in self._available_channels}
        missing = [cid for cid in channel_ids if cid not in available_ids]
        if missing:
            raise ValueError(f"Unknown channel ids: {missing}")
        # duplicates collapse onto their first position
        self._active_channel_ids = list(dict.fromkeys(channel_ids))

    def get_active_channels(self) -> List[ChannelInfo]:
        with self._state_lock:
            id_to_info = {ch.id: ch for ch in self._available_channels}
            return [id_to_info[cid] for cid in self._active_channel_ids if cid in id_to_info]

    # --------------
    # Introspection
    # --------------

    @property
    def state(self) -> State:
        with self._state_lock:
            return self._state

    @property
    def running(self) -> bool:
        return self.state == "running"

    def stats(self) -> dict[str, Any]:
        """Counters since the last start, for status displays and logs."""
        return {
            "state": self.state,
            "reads": self._reads,
            "samples_read": self._samples_read,
            "sample_rate": None if self.config is None else self.config.sample_rate,
            "active_channels": [ch.id for ch in self.get_active_channels()],
        }

    def _assert_state(self, expected: Iterable[State]) -> None:
        expected = tuple(expected)
        if self._state not in expected:
            raise RuntimeError(f"Invalid state: {self._state}; expected one of {expected}.")


__all__ = [
    "AcquisitionError",
    "AcquisitionReadError",
    "AcquisitionStartError",
    "AcquisitionStopError",
    "ActualConfig",
    "BaseSource",
    "State",
]
