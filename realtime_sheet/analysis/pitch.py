"""Pitch utilities: frequency to pitch mapping and single-buffer estimators."""

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import numpy as np
import librosa

from ..core.constants import PITCH_NAMES, MIN_FREQUENCY_HZ, MAX_FREQUENCY_HZ


@dataclass(frozen=True)
class PitchInfo:
    """Equal-tempered pitch nearest to a frequency."""

    pitch_name: str
    octave: int
    midi: int

    @property
    def label(self) -> str:
        return f"{self.pitch_name}{self.octave}"


def frequency_to_midi(frequency_hz: float) -> int:
    """Convert frequency (Hz) to the nearest MIDI pitch, rounding halves up."""
    if not math.isfinite(frequency_hz) or frequency_hz <= 0:
        raise ValueError(f"Frequency must be positive and finite, got {frequency_hz}")
    return int(math.floor(12 * math.log2(frequency_hz / 440.0) + 69 + 0.5))


def frequency_to_pitch(frequency_hz: float) -> PitchInfo:
    """
    Map a frequency to pitch name, octave and MIDI number.

    Args:
        frequency_hz: Frequency in Hz, must be > 0

    Returns:
        PitchInfo (e.g., 440.0 -> A, 4, 69)
    """
    midi = frequency_to_midi(frequency_hz)
    octave = midi // 12 - 1
    pitch_class = ((midi % 12) + 12) % 12
    return PitchInfo(pitch_name=PITCH_NAMES[pitch_class], octave=octave, midi=midi)


def midi_to_frequency(midi: int) -> float:
    """Convert MIDI pitch to frequency (Hz)."""
    return 440.0 * (2 ** ((midi - 69) / 12.0))


class PitchEstimator(Protocol):
    """Anything that returns (frequency_hz, clarity) for one sample buffer."""

    def estimate(self, buffer: np.ndarray, sample_rate: int) -> Tuple[float, float]:
        ...


class NsdfPitchEstimator:
    """McLeod pitch method on a single buffer.

    Computes the normalized square difference function (NSDF), picks the
    first key maximum reaching ``cutoff`` times the highest key maximum and
    refines it with parabolic interpolation. The interpolated NSDF height is
    reported as clarity, so a clean periodic tone scores close to 1.0.
    """

    def __init__(self, cutoff: float = 0.97, min_rms: float = 1e-4):
        """
        Initialize NsdfPitchEstimator.

        Args:
            cutoff: Fraction of the highest key maximum a peak must reach
            min_rms: Buffers quieter than this are reported as unvoiced
        """
        self.cutoff = cutoff
        self.min_rms = min_rms

    def estimate(self, buffer: np.ndarray, sample_rate: int) -> Tuple[float, float]:
        x = np.asarray(buffer, dtype=np.float64)
        if x.size < 4 or np.sqrt(np.mean(x**2)) < self.min_rms:
            return 0.0, 0.0

        nsdf = self._nsdf(x)
        tau = self._pick_key_maximum(nsdf)
        if tau is None:
            return 0.0, 0.0

        period, clarity = self._interpolate(nsdf, tau)
        if period <= 0:
            return 0.0, 0.0

        return float(sample_rate / period), float(min(clarity, 1.0))

    @staticmethod
    def _nsdf(x: np.ndarray) -> np.ndarray:
        n = x.size
        size = 1 << int(math.ceil(math.log2(2 * n)))
        spectrum = np.fft.rfft(x, size)
        acf = np.fft.irfft(spectrum * np.conj(spectrum), size)[:n]

        # m(tau) = sum of x_j^2 + x_{j+tau}^2 over the overlapping part
        cs = np.concatenate(([0.0], np.cumsum(x**2)))
        taus = np.arange(n)
        m = cs[n - taus] + (cs[n] - cs[taus])

        with np.errstate(divide="ignore", invalid="ignore"):
            nsdf = np.where(m > 0, 2.0 * acf / m, 0.0)
        return nsdf

    def _pick_key_maximum(self, nsdf: np.ndarray) -> Optional[int]:
        positive = nsdf > 0
        negative = np.flatnonzero(~positive)
        if negative.size == 0:
            return None
        start = int(negative[0])

        rising = np.flatnonzero(~positive[start:-1] & positive[start + 1:]) + start + 1
        falling = np.flatnonzero(positive[start:-1] & ~positive[start + 1:]) + start + 1

        key_maxima = []
        for r in rising:
            ends = falling[falling > r]
            end = int(ends[0]) if ends.size else nsdf.size
            peak = int(r + np.argmax(nsdf[r:end]))
            key_maxima.append(peak)

        if not key_maxima:
            return None

        highest = max(nsdf[k] for k in key_maxima)
        threshold = self.cutoff * highest
        for k in key_maxima:
            if nsdf[k] >= threshold:
                return k
        return None

    @staticmethod
    def _interpolate(nsdf: np.ndarray, tau: int) -> Tuple[float, float]:
        if tau <= 0 or tau >= nsdf.size - 1:
            return float(tau), float(nsdf[tau])

        a, b, c = nsdf[tau - 1], nsdf[tau], nsdf[tau + 1]
        denom = a - 2 * b + c
        if denom == 0:
            return float(tau), float(b)

        shift = 0.5 * (a - c) / denom
        peak = b - 0.25 * (a - c) * shift
        return float(tau + shift), float(peak)


class PyinPitchEstimator:
    """Probabilistic YIN estimator backed by librosa.

    The voiced probability of the single analysis frame is used as clarity.
    """

    def __init__(
        self,
        fmin: float = MIN_FREQUENCY_HZ,
        fmax: float = MAX_FREQUENCY_HZ,
    ):
        self.fmin = fmin
        self.fmax = fmax

    def estimate(self, buffer: np.ndarray, sample_rate: int) -> Tuple[float, float]:
        y = np.asarray(buffer, dtype=np.float32)
        frame_length = y.size
        if frame_length < 64 or not np.any(y):
            return 0.0, 0.0

        # The longest period must fit inside the frame alongside the YIN window
        fmin = max(self.fmin, 2.0 * sample_rate / frame_length)

        f0, voiced_flag, voiced_prob = librosa.pyin(
            y,
            fmin=fmin,
            fmax=min(self.fmax, sample_rate / 2.0),
            sr=sample_rate,
            frame_length=frame_length,
            hop_length=frame_length,
            center=False,
        )

        if f0.size == 0 or not voiced_flag[0] or not np.isfinite(f0[0]):
            return 0.0, 0.0

        return float(f0[0]), float(voiced_prob[0])
