"""Acquisition backend discovery.

Every module in :mod:`daq` other than ``base_source`` and this one is imported
and searched for concrete :class:`~daq.base_source.BaseSource` subclasses.
Modules whose vendor package is not installed (``nidaqmx`` for instance) fail
to import and are left out, so the strip chart always has at least the
simulator to fall back on.

Example::

    from daq.registry import find_source

    descriptor, device = find_source()
    source = descriptor.create()
    source.open(device.id)
"""

from __future__ import annotations

import importlib
import inspect
import logging
import os
import pkgutil
from dataclasses import dataclass, field
from types import ModuleType
from typing import Dict, Iterator, List, Optional, Tuple, Type

from shared.models import DeviceInfo

from .base_source import BaseSource

logger = logging.getLogger(__name__)

_SKIP_MODULES = frozenset({"base_source", "registry", "__init__"})
_REGISTRY: Dict[str, "SourceDescriptor"] = {}
_scanned = False


@dataclass
class SourceDescriptor:
    """A discovered backend class plus the hints a picker needs."""

    key: str
    name: str
    cls: Type[BaseSource]
    priority: int = 0
    hints: Dict[str, object] = field(default_factory=dict)

    def create(self, **kwargs) -> BaseSource:
        return self.cls(**kwargs)

    def probe(self) -> List[DeviceInfo]:
        """Devices currently visible to the backend; empty if enumeration fails."""
        try:
            return list(self.cls.list_available_devices())
        except Exception as exc:
            logger.debug("Device enumeration for %s failed: %s", self.key, exc)
            return []


def _concrete_sources(module: ModuleType) -> Iterator[Type[BaseSource]]:
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ != module.__name__:
            continue
        if issubclass(obj, BaseSource) and not inspect.isabstract(obj):
            yield obj


def _hints_for(cls: Type[BaseSource]) -> Dict[str, object]:
    hints: Dict[str, object] = {}
    doc = inspect.getdoc(cls)
    if doc:
        hints["description"] = doc.splitlines()[0]
    if hasattr(cls, "DEFAULT_SAMPLE_RATE"):
        hints["default_sample_rate"] = float(cls.DEFAULT_SAMPLE_RATE)
    if hasattr(cls, "NOTES"):
        hints["notes"] = cls.NOTES
    return hints


def scan_sources(force: bool = False) -> None:
    """Import every driver module under :mod:`daq` and record its backends."""

    global _scanned
    if _scanned and not force:
        return

    _REGISTRY.clear()
    package = __name__.rsplit(".", 1)[0]
    for module_info in pkgutil.iter_modules([os.path.dirname(__file__)], package + "."):
        if module_info.name.rsplit(".", 1)[-1] in _SKIP_MODULES:
            continue
        try:
            module = importlib.import_module(module_info.name)
        except Exception as exc:
            logger.debug("Skipping acquisition module %s: %s", module_info.name, exc)
            continue
        for cls in _concrete_sources(module):
            key = f"{cls.__module__}.{cls.__name__}"
            _REGISTRY[key] = SourceDescriptor(
                key=key,
                name=cls.device_class_name(),
                cls=cls,
                priority=int(getattr(cls, "PRIORITY", 0)),
                hints=_hints_for(cls),
            )
            logger.debug("Registered acquisition backend %s", key)

    _scanned = True


def list_sources() -> List[SourceDescriptor]:
    """Discovered backends, highest priority first."""

    scan_sources()
    return sorted(_REGISTRY.values(), key=lambda d: (-d.priority, d.key))


def get_source(key: str) -> SourceDescriptor:
    scan_sources()
    try:
        return _REGISTRY[key]
    except KeyError:
        raise KeyError(f"No acquisition backend registered for key {key!r}") from None


def create_source(key: str, **kwargs) -> BaseSource:
    """Instantiate the backend registered under ``key``."""

    return get_source(key).create(**kwargs)


def find_source(key: Optional[str] = None) -> Tuple[SourceDescriptor, DeviceInfo]:
    """
    Pick a backend and one of its devices.

    With ``key`` only that backend is considered. Otherwise backends are tried
    by descending priority and the first with a visible device wins, which
    puts real hardware ahead of the simulator.
    """

    candidates = [get_source(key)] if key is not None else list_sources()
    for descriptor in candidates:
        devices = descriptor.probe()
        if devices:
            logger.info("Using %s device %s", descriptor.name, devices[0].name)
            return descriptor, devices[0]
    raise LookupError("No acquisition device available")


__all__ = [
    "SourceDescriptor",
    "create_source",
    "find_source",
    "get_source",
    "list_sources",
    "scan_sources",
]
