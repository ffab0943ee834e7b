"""Bounded FIFO sample storage for the swing engine.

``SampleRingBuffer`` keeps the newest ``capacity`` samples in a numpy
circular array (one row per channel) and numbers every appended sample with
a monotonically increasing logical id.  Callers track positions by logical
id, so eviction never requires re-indexing a cursor.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..domain_models import SensorSample
from ..exceptions import ConfigurationError

CHANNELS = ("ax", "ay", "az", "gx", "gy", "gz", "mic_rms")
_ACCEL_ROWS = slice(0, 3)
_GYRO_ROWS = slice(3, 6)
_MIC_ROW = 6


@dataclass(slots=True)
class ChannelBlock:
    """Chronological copy of consecutive samples, split by channel."""

    first_id: int
    t_s: np.ndarray
    accel_g: np.ndarray
    gyro_dps: np.ndarray
    mic_rms: np.ndarray

    def __len__(self) -> int:
        return int(self.t_s.shape[0])

    @property
    def last_id(self) -> int:
        return self.first_id + len(self) - 1

    def accel_magnitude(self) -> np.ndarray:
        return np.sqrt(np.sum(self.accel_g * self.accel_g, axis=0))

    def gyro_magnitude(self) -> np.ndarray:
        return np.sqrt(np.sum(self.gyro_dps * self.gyro_dps, axis=0))


class SampleRingBuffer:
    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ConfigurationError(f"buffer capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._data = np.zeros((len(CHANNELS), capacity), dtype=np.float64)
        self._t = np.zeros(capacity, dtype=np.float64)
        self._write_idx = 0
        self._count = 0
        self._total = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._count

    @property
    def total_appended(self) -> int:
        """Logical id the next appended sample will receive."""
        return self._total

    @property
    def evicted_total(self) -> int:
        return self._total - self._count

    @property
    def oldest_id(self) -> int:
        return self._total - self._count

    @property
    def newest_id(self) -> int | None:
        return self._total - 1 if self._count else None

    def contains_id(self, sample_id: int) -> bool:
        return self.oldest_id <= sample_id < self._total

    def append(self, sample: SensorSample) -> bool:
        """Store *sample*; return ``True`` when the oldest sample was evicted."""
        idx = self._write_idx
        self._data[:, idx] = (
            sample.ax,
            sample.ay,
            sample.az,
            sample.gx,
            sample.gy,
            sample.gz,
            sample.mic_rms,
        )
        self._t[idx] = sample.t_s
        self._write_idx = (idx + 1) % self._capacity
        evicted = self._count == self._capacity
        if not evicted:
            self._count += 1
        self._total += 1
        return evicted

    def latest(self, n: int) -> ChannelBlock:
        """Return the newest *n* samples (fewer if the buffer holds fewer)."""
        n = max(0, min(int(n), self._count))
        start = (self._write_idx - n) % self._capacity
        idx = (start + np.arange(n)) % self._capacity
        data = self._data[:, idx]
        return ChannelBlock(
            first_id=self._total - n,
            t_s=self._t[idx],
            accel_g=data[_ACCEL_ROWS],
            gyro_dps=data[_GYRO_ROWS],
            mic_rms=data[_MIC_ROW],
        )

    def clear(self) -> None:
        """Drop all samples and restart logical ids at zero."""
        self._data[:] = 0.0
        self._t[:] = 0.0
        self._write_idx = 0
        self._count = 0
        self._total = 0
