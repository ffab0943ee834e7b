from __future__ import annotations

import numpy as np
import pytest

from swingsense.exceptions import DegenerateSignalError
from swingsense.processing.fft import (
    compute_spectral_features,
    numpy_rfft,
    power_ratio,
    validate_window,
)

FS = 100.0


def _impulse(n: int, center: int, amplitude: float) -> np.ndarray:
    mic = np.zeros(n)
    mic[center - 1 : center + 2] = [amplitude / 2, amplitude, amplitude / 2]
    return mic


def _half_sine(n: int, center: int, peak: float = 300.0, half_width: int = 15) -> np.ndarray:
    gyro = np.zeros(n)
    j = np.arange(-half_width, half_width + 1)
    gyro[center + j] = peak * np.sin(np.pi * (j + half_width) / (2 * half_width))
    return gyro


class TestSpectralFeatures:
    def test_sinusoid_peak_within_one_bin(self) -> None:
        n = 128
        t = np.arange(n) / FS
        features = compute_spectral_features(np.sin(2 * np.pi * 12.5 * t), FS)
        assert features is not None
        assert abs(features.peak_hz - 12.5) <= FS / n
        assert features.freqs_hz[1] == pytest.approx(FS / n)
        assert features.power.shape == (n // 2 + 1,)
        assert features.total_power == pytest.approx(float(np.sum(features.power)))

    def test_dc_is_removed(self) -> None:
        features = compute_spectral_features(np.full(64, 7.0), FS)
        assert features is not None
        assert features.total_power == pytest.approx(0.0, abs=1e-18)

    @pytest.mark.parametrize("n", [0, 1, 4])
    def test_too_short(self, n: int) -> None:
        assert compute_spectral_features(np.arange(n, dtype=float), FS) is None

    def test_non_finite(self) -> None:
        values = np.ones(16)
        values[3] = np.inf
        assert compute_spectral_features(values, FS) is None

    def test_custom_transform_is_used(self) -> None:
        calls: list[int] = []

        def spy(signal: np.ndarray) -> np.ndarray:
            calls.append(signal.size)
            return numpy_rfft(signal)

        compute_spectral_features(np.arange(10, dtype=float), FS, transform=spy)
        assert calls == [10]


class TestValidateWindow:
    def test_impact_burst_is_valid(self) -> None:
        result = validate_window(_impulse(100, 50, 20_000.0), _half_sine(100, 50), FS)
        assert result is not None
        assert result.is_valid
        assert result.ratio > 35.0
        assert result.ratio == pytest.approx(power_ratio(result.mic_power, result.gyro_power))

    def test_quiet_mic_is_not_valid(self) -> None:
        result = validate_window(_impulse(100, 50, 50.0), _half_sine(100, 50), FS)
        assert result is not None
        assert not result.is_valid
        assert result.ratio < 35.0

    def test_ratio_invariant_to_common_scale(self) -> None:
        mic = _impulse(100, 50, 500.0)
        gyro = _half_sine(100, 50)
        base = validate_window(mic, gyro, FS)
        scaled = validate_window(mic * 7.0, gyro * 7.0, FS)
        assert base is not None and scaled is not None
        assert scaled.ratio == pytest.approx(base.ratio, rel=1e-6)

    def test_ratio_independent_of_transform_normalisation(self) -> None:
        mic = _impulse(100, 50, 500.0)
        gyro = _half_sine(100, 50)
        plain = validate_window(mic, gyro, FS)
        ortho = validate_window(
            mic, gyro, FS, transform=lambda x: np.fft.rfft(x, norm="ortho")
        )
        assert plain is not None and ortho is not None
        assert ortho.ratio == pytest.approx(plain.ratio, rel=1e-6)
        assert ortho.is_valid == plain.is_valid

    def test_threshold_is_strict(self) -> None:
        mic = _impulse(100, 50, 500.0)
        gyro = _half_sine(100, 50)
        ratio = validate_window(mic, gyro, FS).ratio  # type: ignore[union-attr]
        assert not validate_window(mic, gyro, FS, threshold=ratio).is_valid  # type: ignore[union-attr]
        assert validate_window(mic, gyro, FS, threshold=ratio * 0.99).is_valid  # type: ignore[union-attr]

    def test_short_windows_are_skipped(self) -> None:
        assert validate_window(np.arange(4.0), np.arange(4.0), FS) is None

    def test_zero_variance_mic_is_degenerate(self) -> None:
        with pytest.raises(DegenerateSignalError, match="mic"):
            validate_window(np.zeros(50), _half_sine(50, 25), FS)

    def test_zero_variance_gyro_is_degenerate(self) -> None:
        with pytest.raises(DegenerateSignalError, match="gyro"):
            validate_window(_impulse(50, 25, 10.0), np.full(50, 3.0), FS)

    def test_nan_is_degenerate(self) -> None:
        mic = _impulse(50, 25, 10.0)
        mic[0] = np.nan
        with pytest.raises(DegenerateSignalError):
            validate_window(mic, _half_sine(50, 25), FS)
