"""Duplicate suppression for swings seen by overlapping analysis passes.

Each pass re-examines the most recent samples, so one physical swing is
detected several times.  The gate accepts the first valid detection and then
drops every further one until ``min_separation_s`` of *sample time* has
elapsed since the last **accepted** swing.  Dropped detections never move
the clock, which keeps spurious repeated candidates from extending the
cooldown indefinitely.  The owner calls :meth:`EmissionGate.refresh` with the
newest sample time so the reported state returns to IDLE once the interval
has passed.
"""

from __future__ import annotations

import enum
import logging

from ..constants import MIN_SWING_INTERVAL_S
from ..domain_models import SwingEvent

LOGGER = logging.getLogger(__name__)


class GateState(enum.Enum):
    IDLE = "idle"
    COOLDOWN = "cooldown"


class EmissionGate:
    def __init__(self, min_separation_s: float = MIN_SWING_INTERVAL_S) -> None:
        if min_separation_s < 0:
            raise ValueError(f"min_separation_s must be >= 0, got {min_separation_s!r}")
        self.min_separation_s = float(min_separation_s)
        self._state = GateState.IDLE
        self._last_accepted_s: float | None = None
        self.accepted_total = 0
        self.suppressed_total = 0

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def last_accepted_s(self) -> float | None:
        return self._last_accepted_s

    def state_at(self, t_s: float) -> GateState:
        """Gate state as seen by an event stamped *t_s* (no side effects)."""
        if self._last_accepted_s is None:
            return GateState.IDLE
        if t_s - self._last_accepted_s >= self.min_separation_s:
            return GateState.IDLE
        return GateState.COOLDOWN

    def refresh(self, t_s: float) -> GateState:
        """Advance the gate clock to sample time *t_s*; COOLDOWN expires here."""
        self._state = self.state_at(t_s)
        return self._state

    def admit(self, event: SwingEvent) -> SwingEvent | None:
        """Return *event* if it is a new valid swing, else ``None``."""
        if not event.is_valid_swing:
            return None
        if self.refresh(event.timestamp_s) is GateState.COOLDOWN:
            self.suppressed_total += 1
            LOGGER.debug(
                "Suppressed re-detection at t=%.3fs (%.3fs after accepted swing)",
                event.timestamp_s,
                event.timestamp_s - (self._last_accepted_s or 0.0),
            )
            return None
        self._last_accepted_s = event.timestamp_s
        self._state = GateState.COOLDOWN
        self.accepted_total += 1
        return event

    def reset(self) -> None:
        self._state = GateState.IDLE
        self._last_accepted_s = None
        self.accepted_total = 0
        self.suppressed_total = 0
