"""Tempo estimation for recorded audio."""

import logging

import numpy as np
import librosa

from ..core.constants import DEFAULT_TEMPO, MIN_TEMPO, MAX_TEMPO

logger = logging.getLogger(__name__)


class TempoAnalyzer:
    """Estimate a usable session tempo from a recording."""

    def __init__(self, hop_length: int = 512):
        self.hop_length = hop_length

    def detect(self, audio: np.ndarray, sr: int) -> float:
        """
        Detect tempo in BPM, folded into the accepted tempo range.

        Args:
            audio: Audio array
            sr: Sample rate

        Returns:
            Tempo in BPM; DEFAULT_TEMPO when beat tracking finds nothing
        """
        tempo, _ = librosa.beat.beat_track(
            y=audio,
            sr=sr,
            hop_length=self.hop_length,
        )

        # Handle tempo as array (newer librosa versions)
        if isinstance(tempo, np.ndarray):
            tempo = float(tempo[0]) if len(tempo) > 0 else 0.0

        return self.fold(float(tempo))

    @staticmethod
    def fold(bpm: float) -> float:
        """Double or halve ``bpm`` until it lies within MIN_TEMPO..MAX_TEMPO."""
        # A sustained tone gives the beat tracker nothing to lock onto
        if not np.isfinite(bpm) or bpm <= 0:
            logger.info("Tempo detection failed; using %.1f BPM", DEFAULT_TEMPO)
            return DEFAULT_TEMPO

        while bpm > MAX_TEMPO:
            bpm /= 2.0
        while bpm < MIN_TEMPO:
            bpm *= 2.0
        return bpm
