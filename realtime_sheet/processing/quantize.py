"""Duration quantization - map note durations onto beats."""

import math
from typing import Optional

from ..core.constants import DEFAULT_TEMPO, FALLBACK_DURATION_MS


def effective_duration_ms(duration_ms: Optional[float]) -> float:
    """Duration with missing or non-positive values replaced by a default."""
    if duration_ms is None or not duration_ms > 0:
        return FALLBACK_DURATION_MS
    return duration_ms


def beat_weight(duration_ms: Optional[float]) -> float:
    """
    Coarse notation value of a duration, in quarter beats.

    Fixed thresholds independent of tempo: >=1800 ms whole, >=900 ms half,
    >=450 ms quarter, anything shorter an eighth.
    """
    if duration_ms is None:
        return 1.0
    if duration_ms >= 1800:
        return 4.0
    if duration_ms >= 900:
        return 2.0
    if duration_ms >= 450:
        return 1.0
    return 0.5


class Quantizer:
    """Convert millisecond durations to beats at a tempo."""

    def __init__(self, tempo: float = DEFAULT_TEMPO):
        """
        Initialize Quantizer.

        Args:
            tempo: Tempo in BPM; non-positive values fall back to DEFAULT_TEMPO
        """
        self.tempo = tempo if tempo > 0 else DEFAULT_TEMPO

    @property
    def quarter_ms(self) -> float:
        """Duration of one quarter beat in milliseconds."""
        return 60000.0 / self.tempo

    def to_beats(self, duration_ms: float) -> float:
        """Unrounded duration in quarter beats."""
        return effective_duration_ms(duration_ms) / self.quarter_ms

    def to_half_beats(self, duration_ms: float) -> float:
        """Duration rounded (halves up) to the nearest half beat, at least 0.5."""
        raw = self.to_beats(duration_ms)
        return max(0.5, math.floor(raw * 2 + 0.5) / 2)

    def to_divisions(self, duration_ms: float, divisions: int = 4) -> int:
        """Duration in ``divisions`` per quarter beat, at least one."""
        return max(1, int(math.floor(self.to_beats(duration_ms) * divisions + 0.5)))
