"""Window refinement: snap a candidate to the angular-rate peak and carve a window.

Angular-rate peaks track the swing apex more reliably than the noisier
acceleration-derivative peak, so the candidate index is only a starting
point for a local search in the gyro-magnitude series.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..constants import MIN_WINDOW_SAMPLES, POST_WINDOW_S, PRE_WINDOW_S, SEARCH_RADIUS_S
from .sample_rate import seconds_to_samples


@dataclass(frozen=True, slots=True)
class AnalysisWindow:
    """Half-open sample range ``[start_index, end_index)`` around an impact."""

    start_index: int
    end_index: int
    center_index: int
    impact_time_s: float

    @classmethod
    def create(
        cls,
        start_index: int,
        end_index: int,
        center_index: int,
        impact_time_s: float,
        *,
        min_samples: int = MIN_WINDOW_SAMPLES,
    ) -> AnalysisWindow | None:
        if end_index <= start_index or end_index - start_index < min_samples:
            return None
        if not start_index <= center_index < end_index:
            return None
        return cls(start_index, end_index, center_index, float(impact_time_s))

    def __len__(self) -> int:
        return self.end_index - self.start_index

    def as_slice(self) -> slice:
        return slice(self.start_index, self.end_index)


def refine_window(
    candidate_idx: int,
    gyro_magnitude: np.ndarray,
    timestamps: np.ndarray,
    sample_rate_hz: float,
    *,
    search_radius_s: float = SEARCH_RADIUS_S,
    pre_window_s: float = PRE_WINDOW_S,
    post_window_s: float = POST_WINDOW_S,
) -> AnalysisWindow | None:
    gyro = np.abs(np.asarray(gyro_magnitude, dtype=np.float64))
    n = int(gyro.shape[0])
    if n == 0 or len(timestamps) != n:
        return None

    radius = seconds_to_samples(search_radius_s, sample_rate_hz)
    s0 = max(0, candidate_idx - radius)
    s1 = min(n - 1, candidate_idx + radius)
    if s1 <= s0:
        return None
    center = s0 + int(np.argmax(gyro[s0 : s1 + 1]))

    start = max(0, center - seconds_to_samples(pre_window_s, sample_rate_hz))
    end = min(n, center + seconds_to_samples(post_window_s, sample_rate_hz))
    return AnalysisWindow.create(start, end, center, float(timestamps[center]))
