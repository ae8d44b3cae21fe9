from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from test.fixtures.controlled_source import ManualClock, open_controlled_source  # noqa: E402


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def controlled_source():
    """Two-channel scripted source, open and configured at 1 kHz."""
    source = open_controlled_source()
    yield source
    source.close()
