"""Engine configuration: defaults, YAML loading and construction-time validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from swingsense.config import (
    DEFAULT_CONFIG,
    EngineConfig,
    PhysicalConstants,
    engine_config_from_dict,
    load_config,
)
from swingsense.exceptions import ConfigurationError


def _write_config(path: Path, payload: object) -> Path:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_defaults_match_calibration() -> None:
    cfg = EngineConfig()
    assert cfg.buffer_capacity == 1000
    assert cfg.min_new_samples == 20
    assert cfg.analysis_window_samples == 200
    assert cfg.power_ratio_threshold == 35.0
    assert cfg.min_swing_interval_s == 0.5
    assert cfg.pre_window_s == cfg.post_window_s == 0.5
    assert cfg.search_radius_s == 0.15
    assert cfg.physics == PhysicalConstants()
    assert cfg.physics.lever_arm_m == 0.39


def test_to_dict_round_trips_through_loader() -> None:
    cfg = EngineConfig(power_ratio_threshold=50.0, physics=PhysicalConstants(lever_arm_m=0.42))
    payload = cfg.to_dict()
    assert set(payload) == set(DEFAULT_CONFIG)
    assert engine_config_from_dict(payload) == cfg


def test_load_config_without_path_returns_defaults() -> None:
    assert load_config() == EngineConfig()


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def test_partial_yaml_overrides_merge_with_defaults(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path / "engine.yaml",
        {"engine": {"power_ratio_threshold": 20, "min_new_samples": 10.0}},
    )
    cfg = load_config(path)
    assert cfg.power_ratio_threshold == 20.0
    assert isinstance(cfg.power_ratio_threshold, float)
    assert cfg.min_new_samples == 10
    assert isinstance(cfg.min_new_samples, int)
    assert cfg.analysis_window_samples == 200


def test_missing_file_falls_back_to_defaults(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="swingsense.config"):
        cfg = load_config(tmp_path / "absent.yaml")
    assert cfg == EngineConfig()
    assert "not found" in caplog.text


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == EngineConfig()


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("engine: [unterminated\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="not valid YAML"):
        load_config(path)


def test_non_mapping_top_level_raises(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "list.yaml", [1, 2, 3])
    with pytest.raises(ConfigurationError, match="top level"):
        load_config(path)


def test_unknown_keys_are_ignored_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="swingsense.config"):
        cfg = engine_config_from_dict(
            {"engine": {"fft_backend": "fast"}, "network": {"port": 1}}
        )
    assert cfg == EngineConfig()
    assert "engine.fft_backend" in caplog.text
    assert "network" in caplog.text


@pytest.mark.parametrize(
    "raw",
    [
        {"engine": {"min_new_samples": 2.5}},
        {"engine": {"power_ratio_threshold": "high"}},
        {"physics": {"lever_arm_m": None}},
        {"engine": "fast"},
    ],
)
def test_bad_values_raise(raw: dict) -> None:
    with pytest.raises(ConfigurationError):
        engine_config_from_dict(raw)


def test_config_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        EngineConfig(buffer_capacity=0)


# ---------------------------------------------------------------------------
# Construction-time validation
# ---------------------------------------------------------------------------


class TestEngineConfigValidation:
    @pytest.mark.parametrize(
        "field", ["buffer_capacity", "min_new_samples", "analysis_window_samples", "perf_log_every"]
    )
    @pytest.mark.parametrize("bad_value", [0, -1, True, 3.0])
    def test_integer_fields_must_be_positive_ints(self, field: str, bad_value: object) -> None:
        with pytest.raises(ConfigurationError, match=field):
            EngineConfig(**{field: bad_value})  # type: ignore[arg-type]

    def test_window_must_fit_in_buffer(self) -> None:
        with pytest.raises(ConfigurationError, match="exceeds buffer_capacity"):
            EngineConfig(buffer_capacity=100, analysis_window_samples=200)

    def test_window_has_minimum_length(self) -> None:
        with pytest.raises(ConfigurationError, match="analysis_window_samples"):
            EngineConfig(analysis_window_samples=10, min_new_samples=5)

    def test_stride_cannot_exceed_window(self) -> None:
        with pytest.raises(ConfigurationError, match="min_new_samples"):
            EngineConfig(min_new_samples=300, buffer_capacity=1000, analysis_window_samples=200)

    @pytest.mark.parametrize(
        "field",
        [
            "pre_window_s",
            "post_window_s",
            "min_peak_separation_s",
            "search_radius_s",
            "threshold_std_mult",
            "power_ratio_threshold",
            "min_swing_interval_s",
        ],
    )
    def test_negative_durations_and_thresholds_rejected(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            EngineConfig(**{field: -0.1})  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", [0.0, -100.0, float("nan"), float("inf")])
    def test_nominal_rate_must_be_positive_finite(self, value: float) -> None:
        with pytest.raises(ConfigurationError, match="nominal_sample_rate_hz"):
            EngineConfig(nominal_sample_rate_hz=value)

    def test_empty_analysis_window_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="pre_window_s"):
            EngineConfig(pre_window_s=0.0, post_window_s=0.0)

    def test_zero_interval_is_allowed(self) -> None:
        assert EngineConfig(min_swing_interval_s=0.0).min_swing_interval_s == 0.0

    def test_physics_type_checked(self) -> None:
        with pytest.raises(ConfigurationError, match="physics"):
            EngineConfig(physics={"lever_arm_m": 0.4})  # type: ignore[arg-type]


class TestPhysicalConstants:
    @pytest.mark.parametrize(
        "field",
        [
            "lever_arm_m",
            "effective_tip_mass_kg",
            "racket_sensor_mass_kg",
            "shuttle_mass_kg",
            "contact_duration_s",
            "shuttle_vs_tip_ratio",
            "gravity_mps2",
        ],
    )
    def test_must_be_strictly_positive(self, field: str) -> None:
        with pytest.raises(ConfigurationError, match=field):
            PhysicalConstants(**{field: 0.0})  # type: ignore[arg-type]

    def test_incoming_speed_may_be_zero(self) -> None:
        assert PhysicalConstants(incoming_speed_std_mps=0.0).incoming_speed_std_mps == 0.0
        with pytest.raises(ConfigurationError):
            PhysicalConstants(incoming_speed_std_mps=-1.0)
