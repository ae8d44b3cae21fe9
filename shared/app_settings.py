from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppSettings:
    sample_rate: float = 50_000.0
    plot_time: float = 10.0
    points_per_channel: int = 1000
    refresh_hz: float = 60.0
    initial_zoom: float = 1.0
    channel_names: Tuple[str, ...] = ("Displacement", "Voltage")
    log_level: str = "INFO"
    # registry key such as "daq.simulated_source.SimulatedSource"; None picks automatically
    source_key: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel_names", tuple(str(n) for n in self.channel_names))
        for name in ("sample_rate", "plot_time", "refresh_hz", "initial_zoom"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number")
            object.__setattr__(self, name, value)
        if int(self.points_per_channel) < 1:
            raise ValueError("points_per_channel must be at least 1")
        object.__setattr__(self, "points_per_channel", int(self.points_per_channel))
        if not self.channel_names:
            raise ValueError("channel_names must not be empty")
        level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {self.log_level!r}")
        object.__setattr__(self, "log_level", level)


class SettingsPersistence(Protocol):
    """Backend that loads and saves raw settings values."""

    def load(self) -> Dict[str, Any]:
        ...

    def save(self, data: Dict[str, Any]) -> None:
        ...


class InMemoryPersistence:
    """Keeps settings for the lifetime of the process only."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def load(self) -> Dict[str, Any]:
        return dict(self._data)

    def save(self, data: Dict[str, Any]) -> None:
        self._data.update(data)


class AppSettingsStore:
    """Thread-safe settings store for application-wide preferences."""

    def __init__(self, persistence: SettingsPersistence | None = None) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[AppSettings], None]] = {}
        self._next_token = 0
        self._persistence = persistence if persistence is not None else InMemoryPersistence()
        self._settings = self._load_settings()

    def _load_settings(self) -> AppSettings:
        raw = self._persistence.load()
        known = {f.name for f in fields(AppSettings)}
        values = {k: v for k, v in raw.items() if k in known}
        try:
            return AppSettings(**values)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring invalid stored settings: %s", exc)
            return AppSettings()

    def get(self) -> AppSettings:
        with self._lock:
            return self._settings

    def update(self, **kwargs) -> AppSettings:
        with self._lock:
            new_settings = replace(self._settings, **kwargs)
            self._settings = new_settings
            callbacks = list(self._subscribers.values())
            self._persistence.save({f.name: getattr(new_settings, f.name) for f in fields(AppSettings)})
        for callback in callbacks:
            try:
                callback(new_settings)
            except Exception as exc:
                logger.debug("App settings subscriber callback failed: %s", exc)
                continue
        return new_settings

    def subscribe(self, callback: Callable[[AppSettings], None], *, replay: bool = True) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            snapshot = self._settings
        if replay:
            callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe


__all__ = ["AppSettings", "AppSettingsStore", "InMemoryPersistence", "SettingsPersistence"]
