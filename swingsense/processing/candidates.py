"""Stroke candidate detection on the acceleration-magnitude derivative."""

from __future__ import annotations

import numpy as np

from ..constants import MIN_PEAK_SEPARATION_S, THRESH_STD_MULT
from .sample_rate import seconds_to_samples


def derivative_threshold(abs_derivative: np.ndarray, std_mult: float) -> float:
    """Adaptive threshold ``mean + std_mult * population_std``."""
    if abs_derivative.size == 0:
        return 0.0
    return float(np.mean(abs_derivative) + std_mult * np.std(abs_derivative))


def find_candidates(
    accel_magnitude: np.ndarray | list[float],
    *,
    sample_rate_hz: float,
    threshold_std_mult: float = THRESH_STD_MULT,
    min_separation_s: float = MIN_PEAK_SEPARATION_S,
) -> list[int]:
    """Return derivative indices that look like stroke onsets.

    An index qualifies when its absolute first difference exceeds the
    adaptive threshold, is a local maximum (>= both neighbours) and lies at
    least ``min_separation_s`` after the previously accepted candidate.
    Indices refer to the derivative series: index ``i`` is the step from
    sample ``i`` to sample ``i + 1``.
    """
    values = np.asarray(accel_magnitude, dtype=np.float64)
    if values.size < 3 or not np.all(np.isfinite(values)):
        return []
    abs_d = np.abs(np.diff(values))
    threshold = derivative_threshold(abs_d, threshold_std_mult)
    min_sep = seconds_to_samples(min_separation_s, sample_rate_hz)

    peaks: list[int] = []
    for i in range(1, abs_d.size - 1):
        value = abs_d[i]
        if value <= threshold or value < abs_d[i - 1] or value < abs_d[i + 1]:
            continue
        if peaks and i - peaks[-1] < min_sep:
            continue
        peaks.append(i)
    return peaks
