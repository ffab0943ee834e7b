"""Effective sampling-rate estimation from sample timestamps."""

from __future__ import annotations

import math

import numpy as np

from ..constants import NOMINAL_SAMPLE_RATE_HZ


def estimate_sample_rate(
    timestamps: np.ndarray | list[float],
    nominal_hz: float = NOMINAL_SAMPLE_RATE_HZ,
) -> float:
    """Return ``(count - 1) / (t_last - t_first)``.

    Falls back to *nominal_hz* for fewer than two timestamps, a non-positive
    span, or a non-finite result.  Recomputed on every analysis pass so that
    sensor timing jitter is absorbed.
    """
    ts = np.asarray(timestamps, dtype=np.float64)
    if ts.size <= 1:
        return float(nominal_hz)
    duration = float(ts[-1] - ts[0])
    if not math.isfinite(duration) or duration <= 0:
        return float(nominal_hz)
    rate = (ts.size - 1) / duration
    if not math.isfinite(rate) or rate <= 0:
        return float(nominal_hz)
    return float(rate)


def seconds_to_samples(seconds: float, sample_rate_hz: float) -> int:
    """Convert a duration to a non-negative sample count, halves rounded up."""
    return max(0, math.floor(float(seconds) * float(sample_rate_hz) + 0.5))
