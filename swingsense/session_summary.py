"""Per-session aggregation of emitted swings.

Mirrors the summary the app shows after a training session: hit count plus
average/max tip speed, impact force, impact acceleration and standardized
shuttle force.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .domain_models import SwingEvent


def _avg_max(values: list[float]) -> tuple[float, float]:
    if not values:
        return 0.0, 0.0
    return sum(values) / len(values), max(values)


@dataclass(frozen=True, slots=True)
class SessionSummary:
    swing_count: int
    start_s: float | None
    end_s: float | None
    avg_speed_kmh: float
    max_speed_kmh: float
    avg_force_n: float
    max_force_n: float
    avg_accel_mps2: float
    max_accel_mps2: float
    avg_shuttle_force_std_n: float
    max_shuttle_force_std_n: float

    @property
    def duration_s(self) -> float:
        if self.start_s is None or self.end_s is None:
            return 0.0
        return max(0.0, self.end_s - self.start_s)

    @classmethod
    def from_events(
        cls,
        events: Iterable[SwingEvent],
        *,
        start_s: float | None = None,
        end_s: float | None = None,
    ) -> SessionSummary:
        swings = [event for event in events if event.is_valid_swing]
        times = [event.timestamp_s for event in swings]
        if start_s is None and times:
            start_s = min(times)
        if end_s is None and times:
            end_s = max(times)
        avg_speed, max_speed = _avg_max([event.peak_tip_speed_kmh for event in swings])
        avg_force, max_force = _avg_max([event.impact_force_n for event in swings])
        avg_accel, max_accel = _avg_max([event.peak_acceleration_mps2 for event in swings])
        avg_std, max_std = _avg_max([event.shuttle_force_std_n for event in swings])
        return cls(
            swing_count=len(swings),
            start_s=start_s,
            end_s=end_s,
            avg_speed_kmh=avg_speed,
            max_speed_kmh=max_speed,
            avg_force_n=avg_force,
            max_force_n=max_force,
            avg_accel_mps2=avg_accel,
            max_accel_mps2=max_accel,
            avg_shuttle_force_std_n=avg_std,
            max_shuttle_force_std_n=max_std,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "swing_count": self.swing_count,
            "start_s": self.start_s,
            "end_s": self.end_s,
            "duration_s": self.duration_s,
            "avg_speed_kmh": self.avg_speed_kmh,
            "max_speed_kmh": self.max_speed_kmh,
            "avg_force_n": self.avg_force_n,
            "max_force_n": self.max_force_n,
            "avg_accel_mps2": self.avg_accel_mps2,
            "max_accel_mps2": self.max_accel_mps2,
            "avg_shuttle_force_std_n": self.avg_shuttle_force_std_n,
            "max_shuttle_force_std_n": self.max_shuttle_force_std_n,
        }


class SessionAccumulator:
    """Collect swings as they are emitted and summarise on demand."""

    def __init__(self, start_s: float | None = None) -> None:
        self.start_s = start_s
        self._events: list[SwingEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    @property
    def events(self) -> list[SwingEvent]:
        return list(self._events)

    def add(self, event: SwingEvent) -> None:
        self._events.append(event)

    def summary(self, end_s: float | None = None) -> SessionSummary:
        return SessionSummary.from_events(self._events, start_s=self.start_s, end_s=end_s)
