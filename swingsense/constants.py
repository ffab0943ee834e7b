"""Shared physical and analysis constants, single source of truth.

Every numeric literal that appears in more than one module should live here
so that a change only needs to happen in one place.  The physical constants
are calibration values measured against ground truth; changing any of them
requires recalibration.
"""

from __future__ import annotations

import math
from typing import Final

# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------
G_TO_MPS2: Final[float] = 9.81
"""Multiply an acceleration in g by this to get metres-per-second squared."""

DEG_TO_RAD: Final[float] = math.pi / 180.0
"""Multiply degrees (or deg/s) by this to get radians (or rad/s)."""

MPS_TO_KMH: Final[float] = 3.6
"""Multiply metres-per-second by this to get kilometres-per-hour."""

# ---------------------------------------------------------------------------
# Racket / shuttle physics
# ---------------------------------------------------------------------------
LEVER_ARM_M: Final[float] = 0.39
"""Distance from the sensor mount (racket neck) to the racket tip."""

EFFECTIVE_TIP_MASS_KG: Final[float] = 0.15
"""Effective mass at the racket tip used for the impact-force estimate."""

RACKET_SENSOR_MASS_KG: Final[float] = 0.10
"""Racket (~90 g) plus sensor (~10 g) mass used for the swing-side force."""

SHUTTLE_MASS_KG: Final[float] = 0.0053
"""Mass of a feather shuttlecock."""

CONTACT_DURATION_S: Final[float] = 0.002
"""String/shuttle contact time."""

SHUTTLE_VS_TIP_RATIO: Final[float] = 1.5
"""Outgoing shuttle speed as a multiple of racket tip speed."""

INCOMING_SPEED_STD_MPS: Final[float] = 15.0
"""Assumed incoming shuttle speed for the standardized rally force."""

# ---------------------------------------------------------------------------
# Detection tuning
# ---------------------------------------------------------------------------
NOMINAL_SAMPLE_RATE_HZ: Final[float] = 100.0
"""Fallback rate when the timestamp span cannot produce an estimate."""

BUFFER_CAPACITY_SAMPLES: Final[int] = 1000
"""Ring buffer size (10 s of history at 100 Hz)."""

MIN_NEW_SAMPLES_FOR_ANALYSIS: Final[int] = 20
"""Re-run analysis every 20 samples (200 ms at 100 Hz)."""

ANALYSIS_WINDOW_SAMPLES: Final[int] = 200
"""Number of most recent samples examined per analysis pass (2 s at 100 Hz)."""

THRESH_STD_MULT: Final[float] = 1.0
"""Derivative threshold = mean + THRESH_STD_MULT * population std."""

MIN_PEAK_SEPARATION_S: Final[float] = 0.50
PRE_WINDOW_S: Final[float] = 0.50
POST_WINDOW_S: Final[float] = 0.50
SEARCH_RADIUS_S: Final[float] = 0.15

MIN_SWING_INTERVAL_S: Final[float] = 0.50
"""Cooldown after an accepted swing during which re-detections are dropped."""

MIC_PER_GYRO_THRESHOLD: Final[float] = 35.0
"""Mic/gyro spectral power ratio above which a window counts as a real impact.

Practice swings typically land at 5-20, genuine hits at 40-100."""

POWER_RATIO_EPSILON: Final[float] = 1e-9
"""Guard added to the gyro power to prevent division by zero."""

# ---------------------------------------------------------------------------
# Minimum sizes
# ---------------------------------------------------------------------------
MIN_WINDOW_SAMPLES: Final[int] = 10
"""Shortest analysis window the refiner will produce."""

MIN_ANALYSIS_WINDOW_SAMPLES: Final[int] = 20
"""Shortest rolling analysis window accepted by the configuration."""

MIN_FFT_SAMPLES: Final[int] = 4
"""Signals with this many samples or fewer are not transformed."""

PERF_LOG_EVERY_PASSES: Final[int] = 20
"""Emit a ``perf`` diagnostic every N analysis passes."""
