"""Time signature inference from note durations."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..core.constants import (
    DEFAULT_TEMPO,
    DEFAULT_TIME_SIGNATURE,
    BEAT_OVERFLOW_TOLERANCE,
    BAR_SNAP_TOLERANCE,
    LEFTOVER_PENALTY,
)
from ..core.note import Note
from ..processing.quantize import Quantizer


@dataclass(frozen=True)
class TimeSignature:
    """A meter such as 3/4 or 6/8."""

    numerator: int
    denominator: int

    @classmethod
    def parse(cls, text: str) -> "TimeSignature":
        """Parse 'N/D' (e.g., '6/8')."""
        try:
            num, den = (int(part) for part in text.strip().split("/"))
        except ValueError:
            raise ValueError(f"Invalid time signature: {text!r}")
        if num <= 0 or den <= 0 or den & (den - 1):
            raise ValueError(f"Invalid time signature: {text!r}")
        return cls(num, den)

    @property
    def capacity(self) -> float:
        """Bar length in quarter beats (6/8 -> 3.0)."""
        return self.numerator * 4.0 / self.denominator

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


# Evaluation order doubles as the tie-break order
CANDIDATE_METERS: Tuple[TimeSignature, ...] = (
    TimeSignature(2, 4),
    TimeSignature(3, 4),
    TimeSignature(4, 4),
    TimeSignature(6, 8),
)


class TimeSignatureDetector:
    """Pick the meter whose bar lines best fit the note durations.

    Each candidate meter is scored by packing the beat sequence into bars:
    a note crossing a bar line costs the square of its overflow, a bar that
    ends within a small tolerance of full snaps shut, and whatever is left
    open at the end costs a fraction of its length.
    """

    def __init__(
        self,
        meters: Sequence[TimeSignature] = CANDIDATE_METERS,
        min_notes: int = 3,
    ):
        self.meters = tuple(meters)
        self.min_notes = min_notes

    def detect(self, notes: Sequence[Note], tempo: float = DEFAULT_TEMPO) -> str:
        """
        Infer the time signature.

        Args:
            notes: Note log
            tempo: Session tempo in BPM

        Returns:
            Time signature string (e.g., '3/4'); '4/4' for fewer than min_notes
        """
        if len(notes) < self.min_notes:
            return DEFAULT_TIME_SIGNATURE

        quantizer = Quantizer(tempo)
        beats = [quantizer.to_half_beats(n.duration_ms) for n in notes]

        best = DEFAULT_TIME_SIGNATURE
        best_penalty = float("inf")
        for meter in self.meters:
            penalty = self.penalty(beats, meter.capacity)
            if penalty < best_penalty:
                best_penalty = penalty
                best = str(meter)
        return best

    @staticmethod
    def penalty(beats: List[float], capacity: float) -> float:
        """Bar-fit penalty of a beat sequence for one bar capacity."""
        position = 0.0
        penalty = 0.0

        for duration in beats:
            next_position = position + duration
            if next_position > capacity + BEAT_OVERFLOW_TOLERANCE:
                overflow = next_position - capacity
                penalty += overflow * overflow
                position = duration % capacity
            elif abs(next_position - capacity) < BAR_SNAP_TOLERANCE:
                position = 0.0
            else:
                position = next_position

        return penalty + abs(position) * LEFTOVER_PENALTY
