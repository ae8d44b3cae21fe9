from __future__ import annotations

from typing import List, Sequence

import numpy as np


class SampleStore:
    """
    Append-only, per-channel sample history backed by growable NumPy arrays.

    All channels are appended together: `append()` takes one chunk per
    channel (possibly empty) and writes every chunk before returning. The
    store keeps the full session history; capacity doubles as needed, so
    memory grows without bound over a long session.
    """

    def __init__(self, n_channels: int, initial_capacity: int = 4096) -> None:
        if n_channels <= 0:
            raise ValueError("n_channels must be positive")
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        self._n_channels = int(n_channels)
        self._initial_capacity = int(initial_capacity)
        self._buffers: List[np.ndarray] = [
            np.empty(self._initial_capacity, dtype=np.float64) for _ in range(self._n_channels)
        ]
        self._lengths: List[int] = [0] * self._n_channels

    @property
    def n_channels(self) -> int:
        return self._n_channels

    @property
    def lengths(self) -> tuple[int, ...]:
        return tuple(self._lengths)

    def __len__(self) -> int:
        """Number of samples held by every channel (the shortest sequence)."""
        return min(self._lengths)

    def append(self, chunks: Sequence[np.ndarray]) -> int:
        """
        Append one chunk per channel, in channel order.

        Returns the number of samples appended to the first channel.
        """
        if len(chunks) != self._n_channels:
            raise ValueError(
                f"expected {self._n_channels} chunks, got {len(chunks)}"
            )
        arrays = [np.asarray(chunk, dtype=np.float64).reshape(-1) for chunk in chunks]
        for index, arr in enumerate(arrays):
            if arr.size == 0:
                continue
            self._ensure_capacity(index, self._lengths[index] + arr.size)
            start = self._lengths[index]
            self._buffers[index][start:start + arr.size] = arr
            self._lengths[index] = start + arr.size
        return int(arrays[0].size)

    def channel(self, index: int) -> np.ndarray:
        """Read-only view of the full history of channel `index`."""
        view = self._buffers[index][: self._lengths[index]]
        view.setflags(write=False)
        return view

    def clear(self) -> None:
        self._buffers = [
            np.empty(self._initial_capacity, dtype=np.float64) for _ in range(self._n_channels)
        ]
        self._lengths = [0] * self._n_channels

    def _ensure_capacity(self, index: int, needed: int) -> None:
        buf = self._buffers[index]
        capacity = buf.shape[0]
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        grown = np.empty(capacity, dtype=np.float64)
        grown[: self._lengths[index]] = buf[: self._lengths[index]]
        self._buffers[index] = grown


__all__ = ["SampleStore"]
