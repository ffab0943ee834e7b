"""Swing-detection processing package.

- :mod:`~swingsense.processing.buffers` — bounded sample ring buffer with logical ids.
- :mod:`~swingsense.processing.sample_rate` — effective sample-rate estimation.
- :mod:`~swingsense.processing.candidates` — adaptive-threshold stroke candidates.
- :mod:`~swingsense.processing.windows` — gyro-peak refinement and window carving.
- :mod:`~swingsense.processing.fft` — mic/gyro spectral power-ratio validation.
- :mod:`~swingsense.processing.metrics` — biomechanical metrics per window.
- :mod:`~swingsense.processing.gate` — duplicate suppression state machine.
- :mod:`~swingsense.processing.engine` — the stateful :class:`SwingEngine`.
"""

from .buffers import ChannelBlock, SampleRingBuffer
from .candidates import find_candidates
from .engine import EngineStats, SwingEngine
from .fft import (
    SpectralFeatures,
    SpectralTransform,
    SpectralValidation,
    compute_spectral_features,
    numpy_rfft,
    validate_window,
)
from .gate import EmissionGate, GateState
from .metrics import compute_metrics
from .sample_rate import estimate_sample_rate, seconds_to_samples
from .windows import AnalysisWindow, refine_window

__all__ = [
    "AnalysisWindow",
    "ChannelBlock",
    "EmissionGate",
    "EngineStats",
    "GateState",
    "SampleRingBuffer",
    "SpectralFeatures",
    "SpectralTransform",
    "SpectralValidation",
    "SwingEngine",
    "compute_metrics",
    "compute_spectral_features",
    "estimate_sample_rate",
    "find_candidates",
    "numpy_rfft",
    "refine_window",
    "seconds_to_samples",
    "validate_window",
]
