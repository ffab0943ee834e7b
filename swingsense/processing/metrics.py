"""Biomechanical metrics for a validated swing window.

Conversion chain (fixed calibration constants, see :class:`PhysicalConstants`):

- peak angular velocity ``omega = max|gyro| * pi/180``  (rad/s)
- tip speed ``v_tip = omega * lever_arm``  (m/s)
- impact acceleration ``a = max|accel - mean(accel)| * g``  (m/s^2)
- impact force ``F = m_tip * a``; swing-side force ``F = m_racket+sensor * a``
- outgoing shuttle speed ``v_out = ratio * v_tip``
- shuttle force ``m_shuttle * v_out / t_contact``; the standardized variant adds
  a fixed incoming speed so sessions with different feed pace compare.
"""

from __future__ import annotations

import numpy as np

from ..config import PhysicalConstants
from ..constants import DEG_TO_RAD
from ..domain_models import SwingEvent
from ..exceptions import DegenerateSignalError
from .windows import AnalysisWindow

_DEFAULT_PHYSICS = PhysicalConstants()


def compute_metrics(
    window: AnalysisWindow,
    accel_window: np.ndarray | list[float],
    gyro_window: np.ndarray | list[float],
    ratio: float,
    *,
    sample_rate_hz: float,
    is_valid: bool,
    physics: PhysicalConstants = _DEFAULT_PHYSICS,
) -> SwingEvent:
    accel = np.asarray(accel_window, dtype=np.float64)
    gyro = np.asarray(gyro_window, dtype=np.float64)
    if accel.size == 0 or gyro.size == 0:
        raise DegenerateSignalError("empty metrics window")
    if not (np.all(np.isfinite(accel)) and np.all(np.isfinite(gyro))):
        raise DegenerateSignalError("metrics window contains NaN/Inf")
    if sample_rate_hz <= 0:
        raise DegenerateSignalError(f"non-positive sample rate {sample_rate_hz!r}")

    omega_rad_s = float(np.max(np.abs(gyro))) * DEG_TO_RAD
    tip_speed = omega_rad_s * physics.lever_arm_m

    accel_peak_g = float(np.max(np.abs(accel - np.mean(accel))))
    accel_peak = accel_peak_g * physics.gravity_mps2

    impact_force = physics.effective_tip_mass_kg * accel_peak
    swing_force = physics.racket_sensor_mass_kg * accel_peak

    speed_out = physics.shuttle_vs_tip_ratio * tip_speed
    shuttle_force = physics.shuttle_mass_kg * speed_out / physics.contact_duration_s
    shuttle_force_std = (
        physics.shuttle_mass_kg
        * (speed_out + physics.incoming_speed_std_mps)
        / physics.contact_duration_s
    )

    return SwingEvent(
        timestamp_s=window.impact_time_s,
        peak_angular_velocity_rad_s=omega_rad_s,
        peak_tip_speed_mps=tip_speed,
        peak_acceleration_g=accel_peak_g,
        peak_acceleration_mps2=accel_peak,
        impact_force_n=impact_force,
        swing_force_n=swing_force,
        shuttle_speed_out_mps=speed_out,
        shuttle_force_actual_n=shuttle_force,
        shuttle_force_std_n=shuttle_force_std,
        duration_ms=int(round(len(window) / sample_rate_hz * 1000.0)),
        power_ratio=float(ratio),
        is_valid=bool(is_valid),
    )
