"""Domain model objects for the swing engine.

``SensorSample`` is the immutable input record pushed by the sensor
transport; ``SwingEvent`` is the only durable output, handed by value to
persistence/UI collaborators.  Both keep a stable dict contract via
``to_dict`` / ``from_dict``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .constants import MPS_TO_KMH

# Quality gates used by the persistence layer to flag implausible swings.
QUALITY_MIN_OMEGA_RAD_S = 3.0
QUALITY_MAX_TIP_SPEED_MPS = 50.0
QUALITY_MAX_IMPACT_FORCE_N = 1000.0
QUALITY_MIN_DURATION_MS = 100
QUALITY_MAX_DURATION_MS = 1500

_SAMPLE_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "t_s": ("t_s", "t", "timestamp", "timestamp_s"),
    "ax": ("ax", "accel_x_g", "accelX"),
    "ay": ("ay", "accel_y_g", "accelY"),
    "az": ("az", "accel_z_g", "accelZ"),
    "gx": ("gx", "gyro_x_dps", "gyroX"),
    "gy": ("gy", "gyro_y_dps", "gyroY"),
    "gz": ("gz", "gyro_z_dps", "gyroZ"),
    "mic_rms": ("mic_rms", "mic", "micRms"),
}


def _as_float_or_none(value: object) -> float | None:
    if value in (None, ""):
        return None
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _lookup(data: dict[str, Any], field_name: str) -> object:
    for key in _SAMPLE_KEY_ALIASES[field_name]:
        if key in data:
            return data[key]
    return None


# ---------------------------------------------------------------------------
# 1) SensorSample
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SensorSample:
    t_s: float
    ax: float
    ay: float
    az: float
    gx: float
    gy: float
    gz: float
    mic_rms: float = 0.0

    @property
    def accel_magnitude_g(self) -> float:
        return math.sqrt(self.ax * self.ax + self.ay * self.ay + self.az * self.az)

    @property
    def gyro_magnitude_dps(self) -> float:
        return math.sqrt(self.gx * self.gx + self.gy * self.gy + self.gz * self.gz)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SensorSample:
        """Parse a sample record, accepting the collaborator's short key names.

        Raises ``ValueError`` when a required field is missing or not a finite
        number.  ``mic_rms`` defaults to 0.0 when absent.
        """
        values: dict[str, float] = {}
        for name in _SAMPLE_KEY_ALIASES:
            raw = _lookup(data, name)
            parsed = _as_float_or_none(raw)
            if parsed is None:
                if name == "mic_rms" and raw in (None, ""):
                    parsed = 0.0
                else:
                    raise ValueError(f"sample field {name!r} missing or not finite: {raw!r}")
            values[name] = parsed
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        return {
            "t_s": self.t_s,
            "ax": self.ax,
            "ay": self.ay,
            "az": self.az,
            "gx": self.gx,
            "gy": self.gy,
            "gz": self.gz,
            "mic_rms": self.mic_rms,
        }


# ---------------------------------------------------------------------------
# 2) SwingEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SwingEvent:
    timestamp_s: float
    peak_angular_velocity_rad_s: float
    peak_tip_speed_mps: float
    peak_acceleration_g: float
    peak_acceleration_mps2: float
    impact_force_n: float
    swing_force_n: float
    shuttle_speed_out_mps: float
    shuttle_force_actual_n: float
    shuttle_force_std_n: float
    duration_ms: int
    power_ratio: float
    is_valid: bool

    @property
    def peak_tip_speed_kmh(self) -> float:
        return self.peak_tip_speed_mps * MPS_TO_KMH

    @property
    def is_valid_swing(self) -> bool:
        """Spectrally validated and physically non-trivial."""
        return (
            self.is_valid
            and self.peak_tip_speed_mps > 0
            and self.peak_acceleration_mps2 > 0
            and self.impact_force_n > 0
        )

    @property
    def passes_quality_gates(self) -> bool:
        return (
            self.peak_angular_velocity_rad_s >= QUALITY_MIN_OMEGA_RAD_S
            and self.peak_tip_speed_mps < QUALITY_MAX_TIP_SPEED_MPS
            and self.impact_force_n < QUALITY_MAX_IMPACT_FORCE_N
            and QUALITY_MIN_DURATION_MS <= self.duration_ms <= QUALITY_MAX_DURATION_MS
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp_s": self.timestamp_s,
            "peak_angular_velocity_rad_s": self.peak_angular_velocity_rad_s,
            "peak_tip_speed_mps": self.peak_tip_speed_mps,
            "peak_tip_speed_kmh": self.peak_tip_speed_kmh,
            "peak_acceleration_g": self.peak_acceleration_g,
            "peak_acceleration_mps2": self.peak_acceleration_mps2,
            "impact_force_n": self.impact_force_n,
            "swing_force_n": self.swing_force_n,
            "shuttle_speed_out_mps": self.shuttle_speed_out_mps,
            "shuttle_force_actual_n": self.shuttle_force_actual_n,
            "shuttle_force_std_n": self.shuttle_force_std_n,
            "duration_ms": self.duration_ms,
            "power_ratio": self.power_ratio,
            "is_valid": self.is_valid,
            "quality_passed": self.passes_quality_gates,
        }

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> SwingEvent:
        """Rebuild an event from :meth:`to_dict` output.

        Derived keys (``peak_tip_speed_kmh``, ``quality_passed``) are ignored;
        numeric fields that are missing or non-finite become 0.0.
        """

        def num(key: str) -> float:
            value = _as_float_or_none(record.get(key))
            return 0.0 if value is None else value

        return cls(
            timestamp_s=num("timestamp_s"),
            peak_angular_velocity_rad_s=num("peak_angular_velocity_rad_s"),
            peak_tip_speed_mps=num("peak_tip_speed_mps"),
            peak_acceleration_g=num("peak_acceleration_g"),
            peak_acceleration_mps2=num("peak_acceleration_mps2"),
            impact_force_n=num("impact_force_n"),
            swing_force_n=num("swing_force_n"),
            shuttle_speed_out_mps=num("shuttle_speed_out_mps"),
            shuttle_force_actual_n=num("shuttle_force_actual_n"),
            shuttle_force_std_n=num("shuttle_force_std_n"),
            duration_ms=int(round(num("duration_ms"))),
            power_ratio=num("power_ratio"),
            is_valid=bool(record.get("is_valid", False)),
        )
