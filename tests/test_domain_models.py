from __future__ import annotations

import pytest
from builders import make_event

from swingsense.domain_models import SensorSample, SwingEvent


class TestSensorSample:
    def test_from_dict_canonical_keys(self) -> None:
        sample = SensorSample.from_dict(
            {"t_s": 0.5, "ax": 1, "ay": 2, "az": 3, "gx": 4, "gy": 5, "gz": 6, "mic_rms": 7}
        )
        assert sample == SensorSample(0.5, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0)

    def test_from_dict_accepts_aliases_and_strings(self) -> None:
        sample = SensorSample.from_dict(
            {
                "timestamp": "1.25",
                "accelX": "0.1",
                "accelY": "0.2",
                "accelZ": "0.98",
                "gyroX": "10",
                "gyroY": "-5",
                "gyroZ": "0",
                "micRms": "12.5",
            }
        )
        assert sample.t_s == 1.25
        assert sample.gy == -5.0
        assert sample.mic_rms == 12.5

    @pytest.mark.parametrize("mic", [None, ""])
    def test_missing_mic_defaults_to_zero(self, mic: object) -> None:
        record = {"t": 0.0, "ax": 0, "ay": 0, "az": 1, "gx": 0, "gy": 0, "gz": 0}
        if mic is not None:
            record["mic"] = mic
        assert SensorSample.from_dict(record).mic_rms == 0.0

    @pytest.mark.parametrize(
        "record",
        [
            {"ax": 0, "ay": 0, "az": 1, "gx": 0, "gy": 0, "gz": 0},
            {"t_s": 0, "ax": "nan", "ay": 0, "az": 1, "gx": 0, "gy": 0, "gz": 0},
            {"t_s": 0, "ax": 0, "ay": 0, "az": 1, "gx": 0, "gy": 0, "gz": "fast"},
            {"t_s": 0, "ax": 0, "ay": 0, "az": 1, "gx": 0, "gy": 0, "gz": 0, "mic_rms": "inf"},
        ],
    )
    def test_from_dict_rejects_missing_or_non_finite(self, record: dict) -> None:
        with pytest.raises(ValueError):
            SensorSample.from_dict(record)

    def test_magnitudes_and_to_dict(self) -> None:
        sample = SensorSample(0.0, 3.0, 4.0, 0.0, 0.0, 0.0, 2.0)
        assert sample.accel_magnitude_g == 5.0
        assert sample.gyro_magnitude_dps == 2.0
        assert SensorSample.from_dict(sample.to_dict()) == sample


class TestSwingEvent:
    def test_to_dict_includes_derived_fields(self) -> None:
        event = make_event(2.0, tip_speed_mps=10.0)
        payload = event.to_dict()
        assert payload["peak_tip_speed_kmh"] == pytest.approx(36.0)
        assert payload["quality_passed"] is True
        assert SwingEvent.from_dict(payload) == event

    def test_from_dict_tolerates_missing_and_non_finite(self) -> None:
        event = SwingEvent.from_dict(
            {"timestamp_s": 1.0, "impact_force_n": None, "power_ratio": "nan"}
        )
        assert event.timestamp_s == 1.0
        assert event.impact_force_n == 0.0
        assert event.power_ratio == 0.0
        assert event.is_valid is False
        assert not event.is_valid_swing

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, True),
            ({"tip_speed_mps": 0.3}, False),
            ({"tip_speed_mps": 55.0}, False),
            ({"impact_force_n": 1500.0}, False),
            ({"duration_ms": 80}, False),
            ({"duration_ms": 1600}, False),
            ({"duration_ms": 100}, True),
        ],
    )
    def test_quality_gates(self, kwargs: dict, expected: bool) -> None:
        assert make_event(**kwargs).passes_quality_gates is expected
