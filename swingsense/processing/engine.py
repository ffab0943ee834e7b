"""Swing engine: ingest, incremental analysis and emission.

``SwingEngine`` is the stateful coordinator: it owns the sample ring buffer,
the analysis cursor and the emission gate, and on every ``min_new_samples``
new samples runs one analysis pass over the most recent
``analysis_window_samples`` samples:

    rate estimate -> candidates -> refined windows -> spectral validation
    -> metrics -> emission gate -> zero-or-one SwingEvent

Passes are run-to-completion inside :meth:`SwingEngine.ingest` and never
nest: a sample pushed by a diagnostic sink while a pass is running is stored
and analysed by the next pass.  The gate clock follows the newest sample
time, so the reported gate state leaves COOLDOWN without a new swing.  Ingestion
is serialised through an internal :class:`threading.RLock` so several
producers can share one engine without corrupting the buffer/cursor pair.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from functools import wraps
from threading import RLock
from typing import Any

import numpy as np

from .. import diagnostics as diag
from ..config import EngineConfig
from ..diagnostics import DiagnosticEvent, DiagnosticSink, LoggingDiagnosticSink
from ..domain_models import SensorSample, SwingEvent
from ..exceptions import DegenerateSignalError
from .buffers import ChannelBlock, SampleRingBuffer
from .candidates import find_candidates
from .fft import SpectralTransform, numpy_rfft, validate_window
from .gate import EmissionGate, GateState
from .metrics import compute_metrics
from .sample_rate import estimate_sample_rate
from .windows import AnalysisWindow, refine_window

LOGGER = logging.getLogger(__name__)


def _synchronized(method):
    @wraps(method)
    def _wrapped(self: SwingEngine, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return _wrapped


@dataclass(slots=True)
class EngineStats:
    hit_count: int
    buffer_size: int
    analyses_total: int
    candidates_total: int
    windows_total: int
    rejected_total: int
    degenerate_total: int
    suppressed_total: int
    failed_total: int
    gate_state: str
    last_sample_rate_hz: float | None
    last_pass_duration_s: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SwingEngine:
    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        sink: DiagnosticSink | None = None,
        transform: SpectralTransform = numpy_rfft,
    ) -> None:
        self.config = config or EngineConfig()
        self._sink: DiagnosticSink = sink or LoggingDiagnosticSink()
        self._transform = transform
        self._buffer = SampleRingBuffer(self.config.buffer_capacity)
        self._gate = EmissionGate(self.config.min_swing_interval_s)
        self._lock = RLock()
        # Logical id of the first sample not yet covered by an analysis pass.
        self._cursor = 0
        self._in_pass = False
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._hit_count = 0
        self._analyses_total = 0
        self._candidates_total = 0
        self._windows_total = 0
        self._rejected_total = 0
        self._degenerate_total = 0
        self._failed_total = 0
        self._last_sample_rate_hz: float | None = None
        self._last_pass_duration_s = 0.0

    # -- read-only views ------------------------------------------------------

    @property
    def buffer(self) -> SampleRingBuffer:
        return self._buffer

    @property
    def analysis_cursor(self) -> int:
        return self._cursor

    @property
    def gate_state(self) -> GateState:
        return self._gate.state

    @_synchronized
    def stats(self) -> EngineStats:
        return EngineStats(
            hit_count=self._hit_count,
            buffer_size=len(self._buffer),
            analyses_total=self._analyses_total,
            candidates_total=self._candidates_total,
            windows_total=self._windows_total,
            rejected_total=self._rejected_total,
            degenerate_total=self._degenerate_total,
            suppressed_total=self._gate.suppressed_total,
            failed_total=self._failed_total,
            gate_state=self._gate.state.value,
            last_sample_rate_hz=self._last_sample_rate_hz,
            last_pass_duration_s=self._last_pass_duration_s,
        )

    # -- ingest ---------------------------------------------------------------

    @_synchronized
    def ingest(self, sample: SensorSample) -> SwingEvent | None:
        """Store *sample* and, when due, run one analysis pass.

        Returns the newly accepted swing, or ``None`` (the common case).
        """
        self._buffer.append(sample)
        try:
            return self._maybe_run_pass()
        finally:
            self._gate.refresh(sample.t_s)

    def _maybe_run_pass(self) -> SwingEvent | None:
        # Samples pushed from a sink callback mid-pass are stored; the next
        # top-level ingest picks them up.
        if self._in_pass:
            return None
        if len(self._buffer) < self.config.analysis_window_samples:
            return None
        total = self._buffer.total_appended
        if total - self._cursor < self.config.min_new_samples:
            return None
        assert self._buffer.contains_id(self._cursor), (
            f"analysis cursor {self._cursor} outside buffer "
            f"[{self._buffer.oldest_id}, {self._buffer.total_appended})"
        )
        self._cursor = total
        self._in_pass = True
        try:
            return self._run_pass()
        finally:
            self._in_pass = False

    def ingest_many(self, samples: Iterable[SensorSample]) -> list[SwingEvent]:
        events: list[SwingEvent] = []
        for sample in samples:
            event = self.ingest(sample)
            if event is not None:
                events.append(event)
        return events

    @_synchronized
    def reset(self) -> None:
        self._buffer.clear()
        self._gate.reset()
        self._cursor = 0
        self._reset_counters()
        LOGGER.info("Swing engine state reset")

    # -- analysis -------------------------------------------------------------

    def _emit(self, kind: str, t_s: float | None = None, **data: Any) -> None:
        try:
            self._sink.emit(DiagnosticEvent(kind=kind, t_s=t_s, data=data))
        except Exception:
            LOGGER.warning("Diagnostic sink failed for %s event", kind, exc_info=True)

    def _run_pass(self) -> SwingEvent | None:
        t_start = time.monotonic()
        self._analyses_total += 1
        block = self._buffer.latest(self.config.analysis_window_samples)
        try:
            event = self._analyze_block(block)
        except Exception as exc:
            self._failed_total += 1
            LOGGER.warning(
                "Swing analysis pass failed ending at sample %d",
                block.last_id,
                exc_info=True,
            )
            self._emit(diag.PASS_FAILED, float(block.t_s[-1]), error=repr(exc))
            event = None
        self._last_pass_duration_s = time.monotonic() - t_start
        if self._analyses_total % self.config.perf_log_every == 0:
            self._emit(
                diag.PERF,
                float(block.t_s[-1]),
                analyses=self._analyses_total,
                duration_ms=self._last_pass_duration_s * 1000.0,
                detections=self._hit_count,
                buffer_size=len(self._buffer),
            )
        return event

    def _refined_windows(
        self,
        candidates: list[int],
        gyro_mag: np.ndarray,
        timestamps: np.ndarray,
        rate: float,
    ) -> list[AnalysisWindow]:
        cfg = self.config
        by_center: dict[int, AnalysisWindow] = {}
        for idx in candidates:
            window = refine_window(
                idx,
                gyro_mag,
                timestamps,
                rate,
                search_radius_s=cfg.search_radius_s,
                pre_window_s=cfg.pre_window_s,
                post_window_s=cfg.post_window_s,
            )
            if window is not None:
                by_center.setdefault(window.center_index, window)
        return [by_center[center] for center in sorted(by_center)]

    def _analyze_block(self, block: ChannelBlock) -> SwingEvent | None:
        cfg = self.config
        rate = estimate_sample_rate(block.t_s, nominal_hz=cfg.nominal_sample_rate_hz)
        self._last_sample_rate_hz = rate
        accel_mag = block.accel_magnitude()
        gyro_mag = block.gyro_magnitude()

        bad_channels = [
            name
            for name, values in (("accel", accel_mag), ("gyro", gyro_mag), ("mic", block.mic_rms))
            if not np.all(np.isfinite(values))
        ]
        if bad_channels:
            self._degenerate_total += 1
            self._emit(
                diag.DEGENERATE_WINDOW,
                float(block.t_s[-1]),
                reason=f"analysis block contains NaN/Inf in {', '.join(bad_channels)}",
                first_id=block.first_id,
            )
            return None

        candidates = find_candidates(
            accel_mag,
            sample_rate_hz=rate,
            threshold_std_mult=cfg.threshold_std_mult,
            min_separation_s=cfg.min_peak_separation_s,
        )
        if not candidates:
            return None
        self._candidates_total += len(candidates)
        self._emit(
            diag.CANDIDATES,
            float(block.t_s[-1]),
            count=len(candidates),
            first_id=block.first_id,
            sample_rate_hz=rate,
        )

        windows = self._refined_windows(candidates, gyro_mag, block.t_s, rate)
        self._windows_total += len(windows)
        for window in windows:
            event = self._evaluate_window(block, window, accel_mag, gyro_mag, rate)
            if event is not None:
                return event
        return None

    def _evaluate_window(
        self,
        block: ChannelBlock,
        window: AnalysisWindow,
        accel_mag: np.ndarray,
        gyro_mag: np.ndarray,
        rate: float,
    ) -> SwingEvent | None:
        cfg = self.config
        span = window.as_slice()
        try:
            validation = validate_window(
                block.mic_rms[span],
                gyro_mag[span],
                rate,
                threshold=cfg.power_ratio_threshold,
                transform=self._transform,
            )
            if validation is None:
                return None
            event = compute_metrics(
                window,
                accel_mag[span],
                gyro_mag[span],
                validation.ratio,
                sample_rate_hz=rate,
                is_valid=validation.is_valid,
                physics=cfg.physics,
            )
        except DegenerateSignalError as exc:
            self._degenerate_total += 1
            self._emit(diag.DEGENERATE_WINDOW, window.impact_time_s, reason=str(exc))
            return None

        if not event.is_valid_swing:
            self._rejected_total += 1
            self._emit(
                diag.WINDOW_REJECTED,
                window.impact_time_s,
                ratio=event.power_ratio,
                threshold=cfg.power_ratio_threshold,
                tip_speed_mps=event.peak_tip_speed_mps,
                accel_mps2=event.peak_acceleration_mps2,
            )
            return None

        admitted = self._gate.admit(event)
        if admitted is None:
            self._emit(
                diag.SWING_SUPPRESSED,
                window.impact_time_s,
                last_accepted_s=self._gate.last_accepted_s,
                ratio=event.power_ratio,
            )
            return None

        self._hit_count += 1
        LOGGER.info(
            "Swing #%d at t=%.3fs ratio=%.2f v_tip=%.2f m/s a_max=%.1f m/s2 F_impact=%.1f N",
            self._hit_count,
            admitted.timestamp_s,
            admitted.power_ratio,
            admitted.peak_tip_speed_mps,
            admitted.peak_acceleration_mps2,
            admitted.impact_force_n,
        )
        self._emit(
            diag.SWING_ACCEPTED,
            admitted.timestamp_s,
            hit=self._hit_count,
            ratio=admitted.power_ratio,
            tip_speed_mps=admitted.peak_tip_speed_mps,
            impact_force_n=admitted.impact_force_n,
            shuttle_force_std_n=admitted.shuttle_force_std_n,
        )
        return admitted
