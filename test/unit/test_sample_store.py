from __future__ import annotations

import numpy as np
import pytest

from shared.sample_store import SampleStore


def test_starts_empty():
    store = SampleStore(2)
    assert len(store) == 0
    assert store.lengths == (0, 0)
    assert store.channel(0).size == 0


def test_append_in_lock_step():
    store = SampleStore(2)
    store.append([np.arange(3), np.arange(3) * 10])
    store.append([np.array([3.0]), np.array([30.0])])
    np.testing.assert_array_equal(store.channel(0), [0, 1, 2, 3])
    np.testing.assert_array_equal(store.channel(1), [0, 10, 20, 30])
    assert len(store) == 4


def test_empty_chunks_are_allowed():
    store = SampleStore(3)
    assert store.append([np.zeros(0)] * 3) == 0
    assert store.lengths == (0, 0, 0)


def test_growth_beyond_initial_capacity_preserves_history():
    store = SampleStore(1, initial_capacity=4)
    expected = []
    for start in range(0, 1000, 7):
        chunk = np.arange(start, start + 7, dtype=np.float64)
        store.append([chunk])
        expected.extend(chunk)
    np.testing.assert_array_equal(store.channel(0), expected)


def test_channel_view_is_read_only():
    store = SampleStore(1)
    store.append([np.ones(5)])
    view = store.channel(0)
    with pytest.raises(ValueError):
        view[0] = 2.0


def test_wrong_chunk_count_rejected():
    store = SampleStore(2)
    with pytest.raises(ValueError):
        store.append([np.ones(3)])


def test_clear():
    store = SampleStore(2)
    store.append([np.ones(5), np.ones(5)])
    store.clear()
    assert store.lengths == (0, 0)


def test_invalid_channel_count():
    with pytest.raises(ValueError):
        SampleStore(0)
