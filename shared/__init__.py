"""
Shared data structures available to both the rendering core and the GUI.
"""

from .app_settings import AppSettings, AppSettingsStore, InMemoryPersistence
from .models import ChannelViewState, FrameInput, Polyline, RenderFrame, ViewBounds
from .sample_store import SampleStore

__all__ = [
    "AppSettings",
    "AppSettingsStore",
    "ChannelViewState",
    "FrameInput",
    "InMemoryPersistence",
    "Polyline",
    "RenderFrame",
    "SampleStore",
    "ViewBounds",
]
