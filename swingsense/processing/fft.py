"""Spectral validation of candidate windows.

All functions in this module are stateless.  A genuine shuttle impact
produces a sharp broadband acoustic transient that is disproportionate to
the smoother rotational energy of the swing, so the ratio of total spectral
power (microphone vs. gyroscope) over the same window separates hits from
practice swings.  Both channels are windowed and transformed identically,
hence any normalisation constant of the transform cancels in the ratio.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from ..constants import MIC_PER_GYRO_THRESHOLD, MIN_FFT_SAMPLES, POWER_RATIO_EPSILON
from ..exceptions import DegenerateSignalError


class SpectralTransform(Protocol):
    """Map a real signal to its complex spectrum over non-negative frequency bins."""

    def __call__(self, signal: np.ndarray) -> np.ndarray: ...


def numpy_rfft(signal: np.ndarray) -> np.ndarray:
    return np.fft.rfft(signal)


@dataclass(frozen=True, slots=True)
class SpectralFeatures:
    freqs_hz: np.ndarray
    magnitudes: np.ndarray
    power: np.ndarray
    total_power: float

    @property
    def peak_hz(self) -> float:
        if self.power.size == 0:
            return 0.0
        return float(self.freqs_hz[int(np.argmax(self.power))])


@dataclass(frozen=True, slots=True)
class SpectralValidation:
    ratio: float
    is_valid: bool
    mic_power: float
    gyro_power: float


def _check_signal(name: str, values: np.ndarray) -> None:
    if not np.all(np.isfinite(values)):
        raise DegenerateSignalError(f"{name} window contains NaN/Inf")
    if float(np.ptp(values)) == 0.0:
        raise DegenerateSignalError(f"{name} window has zero variance")


def compute_spectral_features(
    signal: np.ndarray | list[float],
    sample_rate_hz: float,
    *,
    transform: SpectralTransform = numpy_rfft,
) -> SpectralFeatures | None:
    """DC-removed, Hann-windowed power spectrum of *signal*.

    Returns ``None`` for signals of ``MIN_FFT_SAMPLES`` samples or fewer and
    for signals carrying NaN/Inf.
    """
    values = np.asarray(signal, dtype=np.float64)
    n = int(values.size)
    if n <= MIN_FFT_SAMPLES or not np.all(np.isfinite(values)):
        return None
    centered = values - np.mean(values)
    windowed = centered * np.hanning(n)
    spectrum = np.asarray(transform(windowed))
    magnitudes = np.abs(spectrum)
    power = magnitudes * magnitudes
    freqs = np.arange(spectrum.shape[0], dtype=np.float64) * (float(sample_rate_hz) / n)
    return SpectralFeatures(
        freqs_hz=freqs,
        magnitudes=magnitudes,
        power=power,
        total_power=float(np.sum(power)),
    )


def power_ratio(mic_power: float, gyro_power: float) -> float:
    return float(mic_power) / (float(gyro_power) + POWER_RATIO_EPSILON)


def validate_window(
    mic_window: np.ndarray | list[float],
    gyro_window: np.ndarray | list[float],
    sample_rate_hz: float,
    *,
    threshold: float = MIC_PER_GYRO_THRESHOLD,
    transform: SpectralTransform = numpy_rfft,
) -> SpectralValidation | None:
    """Classify one window as impact (``is_valid``) or non-impact.

    Returns ``None`` when either window is too short to transform.  Raises
    :class:`DegenerateSignalError` for NaN/Inf-bearing or zero-variance
    input; the check runs before any transform so nothing non-finite can
    reach a reported metric.
    """
    mic = np.asarray(mic_window, dtype=np.float64)
    gyro = np.asarray(gyro_window, dtype=np.float64)
    if mic.size <= MIN_FFT_SAMPLES or gyro.size <= MIN_FFT_SAMPLES:
        return None
    _check_signal("mic", mic)
    _check_signal("gyro", gyro)

    mic_features = compute_spectral_features(mic, sample_rate_hz, transform=transform)
    gyro_features = compute_spectral_features(gyro, sample_rate_hz, transform=transform)
    if mic_features is None or gyro_features is None:
        return None

    ratio = power_ratio(mic_features.total_power, gyro_features.total_power)
    if not math.isfinite(ratio):
        raise DegenerateSignalError(f"non-finite power ratio {ratio!r}")
    return SpectralValidation(
        ratio=ratio,
        is_valid=ratio > threshold,
        mic_power=mic_features.total_power,
        gyro_power=gyro_features.total_power,
    )
