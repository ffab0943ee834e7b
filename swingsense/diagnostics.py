"""Structured diagnostic events emitted by the swing engine.

The engine never prints.  Every noteworthy step of an analysis pass
(candidates found, window rejected, swing accepted/suppressed, degenerate
input, periodic timing) is reported as a :class:`DiagnosticEvent` to an
injected :class:`DiagnosticSink`.  The default sink forwards to
:mod:`logging`; tests use :class:`RecordingDiagnosticSink`; the replay CLI
can write a JSONL trail with :class:`JsonlDiagnosticSink`.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .json_utils import dumps_compact

LOGGER = logging.getLogger(__name__)

CANDIDATES = "candidates"
WINDOW_REJECTED = "window_rejected"
DEGENERATE_WINDOW = "degenerate_window"
SWING_ACCEPTED = "swing_accepted"
SWING_SUPPRESSED = "swing_suppressed"
PASS_FAILED = "pass_failed"
PERF = "perf"

_LOG_LEVELS: dict[str, int] = {
    SWING_ACCEPTED: logging.INFO,
    DEGENERATE_WINDOW: logging.INFO,
    PASS_FAILED: logging.WARNING,
}


@dataclass(frozen=True, slots=True)
class DiagnosticEvent:
    kind: str
    t_s: float | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "t_s": self.t_s, "data": dict(self.data)}


class DiagnosticSink(Protocol):
    def emit(self, event: DiagnosticEvent) -> None: ...


class LoggingDiagnosticSink:
    """Forward diagnostics to a :class:`logging.Logger` (debug unless notable)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def emit(self, event: DiagnosticEvent) -> None:
        level = _LOG_LEVELS.get(event.kind, logging.DEBUG)
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, "%s t=%s %s", event.kind, event.t_s, event.data)


class RecordingDiagnosticSink:
    """Keep the most recent *maxlen* diagnostics in memory."""

    def __init__(self, maxlen: int = 10_000) -> None:
        self.events: deque[DiagnosticEvent] = deque(maxlen=max(1, int(maxlen)))

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def __iter__(self) -> Iterator[DiagnosticEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        self.events.clear()


class JsonlDiagnosticSink:
    """Append each diagnostic as one compact JSON line to *path*."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, event: DiagnosticEvent) -> None:
        with self.path.open("a", encoding="utf-8") as f:
            f.write(dumps_compact(event.to_dict()))
            f.write("\n")
