"""Per-tick frame analysis: volume and pitch-confidence gating."""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.constants import (
    CLARITY_THRESHOLD,
    MIN_FREQUENCY_HZ,
    MAX_FREQUENCY_HZ,
)
from .pitch import PitchEstimator, NsdfPitchEstimator


@dataclass(frozen=True)
class FrameAnalysis:
    """Result of analysing one sample buffer."""

    timestamp_ms: float
    volume: int  # 0-100
    frequency_hz: float
    clarity: float
    confident: bool


class FrameAnalyzer:
    """Thin filter between the pitch estimator and the note segmenter."""

    def __init__(
        self,
        estimator: Optional[PitchEstimator] = None,
        clarity_threshold: float = CLARITY_THRESHOLD,
        min_frequency: float = MIN_FREQUENCY_HZ,
        max_frequency: float = MAX_FREQUENCY_HZ,
    ):
        """
        Initialize FrameAnalyzer.

        Args:
            estimator: Pitch estimator (default: NsdfPitchEstimator)
            clarity_threshold: Clarity must be strictly above this value
            min_frequency: Lowest accepted frequency in Hz (inclusive)
            max_frequency: Highest accepted frequency in Hz (inclusive)
        """
        self.estimator = estimator or NsdfPitchEstimator()
        self.clarity_threshold = clarity_threshold
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency

    def analyze(
        self, buffer: np.ndarray, sample_rate: int, timestamp_ms: float
    ) -> FrameAnalysis:
        """
        Analyse one buffer.

        Args:
            buffer: Real-valued samples (typically 2048)
            sample_rate: Sample rate of the buffer
            timestamp_ms: Monotonic time of the tick

        Returns:
            FrameAnalysis with volume and the gated pitch estimate
        """
        volume = self.volume(buffer)
        frequency, clarity = self.estimator.estimate(buffer, sample_rate)
        return FrameAnalysis(
            timestamp_ms=timestamp_ms,
            volume=volume,
            frequency_hz=frequency,
            clarity=clarity,
            confident=self.is_confident(frequency, clarity),
        )

    def is_confident(self, frequency: float, clarity: float) -> bool:
        if not math.isfinite(frequency):
            return False
        return (
            clarity > self.clarity_threshold
            and self.min_frequency <= frequency <= self.max_frequency
        )

    @staticmethod
    def volume(buffer: np.ndarray) -> int:
        """RMS level scaled to 0-100."""
        samples = np.asarray(buffer, dtype=np.float64)
        if samples.size == 0:
            return 0
        rms = float(np.sqrt(np.mean(samples**2)))
        return min(100, int(math.floor(rms * 400 + 0.5)))
