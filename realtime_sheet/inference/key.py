"""Key detection - estimate the major key signature of the note log.

Scores each of the 15 major key signatures (Cb major through C# major, by
circle-of-fifths position -7..+7) against a duration-weighted pitch-class
histogram:

    score = sum(in-scale weight) - 1.1 * sum(out-of-scale weight)

The asymmetric penalty favours keys that explain the bulk of the material
over keys that merely avoid a few chromatic outliers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from ..core.constants import (
    DEFAULT_KEY_SIGNATURE,
    KEY_WEIGHT_UNIT_MS,
    OUT_OF_SCALE_PENALTY,
)
from ..core.note import Note
from ..processing.quantize import effective_duration_ms

FIFTHS_TO_MAJOR_KEY: Dict[int, str] = {
    -7: "Cb",
    -6: "Gb",
    -5: "Db",
    -4: "Ab",
    -3: "Eb",
    -2: "Bb",
    -1: "F",
    0: "C",
    1: "G",
    2: "D",
    3: "A",
    4: "E",
    5: "B",
    6: "F#",
    7: "C#",
}

MAJOR_SCALE_OFFSETS = (0, 2, 4, 5, 7, 9, 11)


def tonic_pitch_class(fifths: int) -> int:
    """Pitch class of the major tonic at a circle-of-fifths position."""
    return (7 * fifths) % 12


def key_signature_to_fifths(key_signature: str) -> int:
    """Circle-of-fifths position of a key label; unknown labels map to 0."""
    for fifths, name in FIFTHS_TO_MAJOR_KEY.items():
        if name == key_signature:
            return fifths
    return 0


@dataclass
class KeyCandidate:
    """A candidate key with its score."""

    fifths: int
    score: float

    @property
    def name(self) -> str:
        return FIFTHS_TO_MAJOR_KEY[self.fifths]


@dataclass
class KeyInfo:
    """Container for key detection results."""

    key_signature: str  # e.g. "Eb"
    fifths: int
    score: float
    pitch_class_distribution: np.ndarray = field(default_factory=lambda: np.zeros(12))
    candidates: List[KeyCandidate] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.key_signature} major"


class KeyDetector:
    """Detect the major key signature from a note list."""

    def __init__(
        self,
        out_of_scale_penalty: float = OUT_OF_SCALE_PENALTY,
        weight_unit_ms: float = KEY_WEIGHT_UNIT_MS,
    ):
        """
        Initialize KeyDetector.

        Args:
            out_of_scale_penalty: Multiplier applied to out-of-scale weight
            weight_unit_ms: Duration worth one histogram unit (minimum weight is 1)
        """
        self.out_of_scale_penalty = out_of_scale_penalty
        self.weight_unit_ms = weight_unit_ms

    def detect(self, notes: Sequence[Note]) -> str:
        """Return the key signature label (e.g., 'F#')."""
        return self.analyze(notes).key_signature

    def analyze(self, notes: Sequence[Note]) -> KeyInfo:
        """
        Score every key signature.

        Args:
            notes: Note log

        Returns:
            KeyInfo with the winning key and all 15 scored candidates
        """
        if not notes:
            return KeyInfo(
                key_signature=DEFAULT_KEY_SIGNATURE,
                fifths=0,
                score=0.0,
            )

        histogram = self._build_pitch_class_distribution(notes)
        candidates = [
            KeyCandidate(fifths, self._score(histogram, fifths))
            for fifths in range(-7, 8)
        ]

        # Strict comparison keeps the lowest fifths position on ties
        best = candidates[0]
        for candidate in candidates[1:]:
            if candidate.score > best.score:
                best = candidate

        return KeyInfo(
            key_signature=best.name,
            fifths=best.fifths,
            score=best.score,
            pitch_class_distribution=histogram,
            candidates=candidates,
        )

    def _build_pitch_class_distribution(self, notes: Sequence[Note]) -> np.ndarray:
        """12-bin histogram, each note weighted by max(1, duration / unit)."""
        histogram = np.zeros(12)
        for note in notes:
            weight = max(1.0, effective_duration_ms(note.duration_ms) / self.weight_unit_ms)
            histogram[note.pitch_class] += weight
        return histogram

    def _score(self, histogram: np.ndarray, fifths: int) -> float:
        in_scale = np.zeros(12, dtype=bool)
        tonic = tonic_pitch_class(fifths)
        in_scale[[(tonic + offset) % 12 for offset in MAJOR_SCALE_OFFSETS]] = True

        inside = float(histogram[in_scale].sum())
        outside = float(histogram[~in_scale].sum())
        return inside - self.out_of_scale_penalty * outside

    def get_scale_notes(self, key_signature: str) -> List[int]:
        """Pitch classes (0-11) of the major scale for a key label."""
        tonic = tonic_pitch_class(key_signature_to_fifths(key_signature))
        return [(tonic + offset) % 12 for offset in MAJOR_SCALE_OFFSETS]
