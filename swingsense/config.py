from __future__ import annotations

import logging
import math
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from . import constants as c
from .exceptions import ConfigurationError

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "engine": {
        "buffer_capacity": c.BUFFER_CAPACITY_SAMPLES,
        "min_new_samples": c.MIN_NEW_SAMPLES_FOR_ANALYSIS,
        "analysis_window_samples": c.ANALYSIS_WINDOW_SAMPLES,
        "nominal_sample_rate_hz": c.NOMINAL_SAMPLE_RATE_HZ,
        "pre_window_s": c.PRE_WINDOW_S,
        "post_window_s": c.POST_WINDOW_S,
        "min_peak_separation_s": c.MIN_PEAK_SEPARATION_S,
        "search_radius_s": c.SEARCH_RADIUS_S,
        "threshold_std_mult": c.THRESH_STD_MULT,
        "power_ratio_threshold": c.MIC_PER_GYRO_THRESHOLD,
        "min_swing_interval_s": c.MIN_SWING_INTERVAL_S,
        "perf_log_every": c.PERF_LOG_EVERY_PASSES,
    },
    "physics": {
        "lever_arm_m": c.LEVER_ARM_M,
        "effective_tip_mass_kg": c.EFFECTIVE_TIP_MASS_KG,
        "racket_sensor_mass_kg": c.RACKET_SENSOR_MASS_KG,
        "shuttle_mass_kg": c.SHUTTLE_MASS_KG,
        "contact_duration_s": c.CONTACT_DURATION_S,
        "shuttle_vs_tip_ratio": c.SHUTTLE_VS_TIP_RATIO,
        "incoming_speed_std_mps": c.INCOMING_SPEED_STD_MPS,
        "gravity_mps2": c.G_TO_MPS2,
    },
}

_INT_ENGINE_FIELDS = frozenset(
    {"buffer_capacity", "min_new_samples", "analysis_window_samples", "perf_log_every"}
)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _require_finite(
    owner: str,
    name: str,
    value: float,
    *,
    minimum: float | None = None,
    strict: bool = False,
) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{owner}.{name} must be a finite number, got {value!r}")
    if minimum is None:
        return
    if strict and value <= minimum:
        raise ConfigurationError(f"{owner}.{name} must be > {minimum}, got {value!r}")
    if not strict and value < minimum:
        raise ConfigurationError(f"{owner}.{name} must be >= {minimum}, got {value!r}")


@dataclass(frozen=True, slots=True)
class PhysicalConstants:
    """Fixed biomechanical calibration table used by the metrics calculator."""

    lever_arm_m: float = c.LEVER_ARM_M
    effective_tip_mass_kg: float = c.EFFECTIVE_TIP_MASS_KG
    racket_sensor_mass_kg: float = c.RACKET_SENSOR_MASS_KG
    shuttle_mass_kg: float = c.SHUTTLE_MASS_KG
    contact_duration_s: float = c.CONTACT_DURATION_S
    shuttle_vs_tip_ratio: float = c.SHUTTLE_VS_TIP_RATIO
    incoming_speed_std_mps: float = c.INCOMING_SPEED_STD_MPS
    gravity_mps2: float = c.G_TO_MPS2

    def __post_init__(self) -> None:
        for name in (
            "lever_arm_m",
            "effective_tip_mass_kg",
            "racket_sensor_mass_kg",
            "shuttle_mass_kg",
            "contact_duration_s",
            "shuttle_vs_tip_ratio",
            "gravity_mps2",
        ):
            _require_finite("physics", name, getattr(self, name), minimum=0.0, strict=True)
        _require_finite(
            "physics", "incoming_speed_std_mps", self.incoming_speed_std_mps, minimum=0.0
        )


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable engine configuration, fixed at construction.

    Second-based fields are converted to sample counts on every analysis pass
    using the current sampling-rate estimate.
    """

    buffer_capacity: int = c.BUFFER_CAPACITY_SAMPLES
    min_new_samples: int = c.MIN_NEW_SAMPLES_FOR_ANALYSIS
    analysis_window_samples: int = c.ANALYSIS_WINDOW_SAMPLES
    nominal_sample_rate_hz: float = c.NOMINAL_SAMPLE_RATE_HZ
    pre_window_s: float = c.PRE_WINDOW_S
    post_window_s: float = c.POST_WINDOW_S
    min_peak_separation_s: float = c.MIN_PEAK_SEPARATION_S
    search_radius_s: float = c.SEARCH_RADIUS_S
    threshold_std_mult: float = c.THRESH_STD_MULT
    power_ratio_threshold: float = c.MIC_PER_GYRO_THRESHOLD
    min_swing_interval_s: float = c.MIN_SWING_INTERVAL_S
    perf_log_every: int = c.PERF_LOG_EVERY_PASSES
    physics: PhysicalConstants = field(default_factory=PhysicalConstants)

    def __post_init__(self) -> None:
        # --- positive-integer guards ------------------------------------------------
        for name in sorted(_INT_ENGINE_FIELDS):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int) or val < 1:
                raise ConfigurationError(f"engine.{name} must be a positive integer, got {val!r}")

        if self.analysis_window_samples < c.MIN_ANALYSIS_WINDOW_SAMPLES:
            raise ConfigurationError(
                f"engine.analysis_window_samples must be >= {c.MIN_ANALYSIS_WINDOW_SAMPLES}, "
                f"got {self.analysis_window_samples}"
            )
        if self.analysis_window_samples > self.buffer_capacity:
            raise ConfigurationError(
                "engine.analysis_window_samples "
                f"({self.analysis_window_samples}) exceeds buffer_capacity ({self.buffer_capacity})"
            )
        if self.min_new_samples > self.analysis_window_samples:
            raise ConfigurationError(
                f"engine.min_new_samples ({self.min_new_samples}) exceeds "
                f"analysis_window_samples ({self.analysis_window_samples})"
            )

        # --- rates and durations ----------------------------------------------------
        _require_finite(
            "engine",
            "nominal_sample_rate_hz",
            self.nominal_sample_rate_hz,
            minimum=0.0,
            strict=True,
        )
        for name in (
            "pre_window_s",
            "post_window_s",
            "min_peak_separation_s",
            "search_radius_s",
            "threshold_std_mult",
            "power_ratio_threshold",
            "min_swing_interval_s",
        ):
            _require_finite("engine", name, getattr(self, name), minimum=0.0)
        if self.pre_window_s + self.post_window_s <= 0:
            raise ConfigurationError("engine.pre_window_s + post_window_s must be > 0")

        if not isinstance(self.physics, PhysicalConstants):
            raise ConfigurationError(
                f"engine.physics must be PhysicalConstants, got {type(self.physics).__name__}"
            )

    def to_dict(self) -> dict[str, Any]:
        engine = {name: getattr(self, name) for name in DEFAULT_CONFIG["engine"]}
        physics = {name: getattr(self.physics, name) for name in DEFAULT_CONFIG["physics"]}
        return {"engine": engine, "physics": physics}


def _coerce_section(section: str, raw: dict[str, Any]) -> dict[str, Any]:
    defaults = DEFAULT_CONFIG[section]
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in defaults:
            LOGGER.warning("Ignoring unknown config key %s.%s", section, key)
            continue
        try:
            if section == "engine" and key in _INT_ENGINE_FIELDS:
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(value)
                out[key] = int(value)
            else:
                out[key] = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{section}.{key} has invalid value {value!r}") from None
    return out


def engine_config_from_dict(raw: dict[str, Any] | None) -> EngineConfig:
    """Build an :class:`EngineConfig` from a (partial) nested config mapping."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"config must be a mapping, got {type(raw).__name__}")
    for key in raw:
        if key not in DEFAULT_CONFIG:
            LOGGER.warning("Ignoring unknown config section %s", key)
    merged = _deep_merge(deepcopy(DEFAULT_CONFIG), raw)
    for section in DEFAULT_CONFIG:
        if not isinstance(merged.get(section), dict):
            raise ConfigurationError(f"config section {section!r} must be a mapping")
    physics = PhysicalConstants(**_coerce_section("physics", merged["physics"]))
    return EngineConfig(**_coerce_section("engine", merged["engine"]), physics=physics)


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        LOGGER.warning("Config file %s not found; using defaults", path)
        return {}
    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{path} is not valid YAML: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a YAML object at the top level.")
        return data


def load_config(config_path: Path | None = None) -> EngineConfig:
    if config_path is None:
        return EngineConfig()
    path = config_path.resolve()
    config = engine_config_from_dict(_read_config_file(path))
    LOGGER.info(
        "Loaded config=%s window=%d samples ratio_threshold=%.1f",
        path,
        config.analysis_window_samples,
        config.power_ratio_threshold,
    )
    return config
