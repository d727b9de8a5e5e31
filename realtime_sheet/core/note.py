"""Note data classes - the fundamental units of live transcription."""

from dataclasses import dataclass
from typing import Optional

from .constants import PITCH_NAMES


@dataclass(frozen=True)
class Candidate:
    """A pitch that is still sounding and has not been finalized yet."""

    frequency_hz: float  # Frequency of the frame that opened the candidate
    pitch_name: str  # e.g. "A#"
    octave: int
    midi: int
    onset_ms: float
    clarity: float

    @property
    def label(self) -> str:
        """Pitch name with octave (e.g., 'A#4')."""
        return f"{self.pitch_name}{self.octave}"

    def finalize(self, now_ms: float) -> "Note":
        """Close the candidate at ``now_ms`` and return the resulting note."""
        return Note(
            frequency_hz=self.frequency_hz,
            pitch_name=self.pitch_name,
            octave=self.octave,
            midi=self.midi,
            onset_ms=self.onset_ms,
            duration_ms=now_ms - self.onset_ms,
            clarity=self.clarity,
        )


@dataclass(frozen=True)
class Note:
    """A finalized note in the session log."""

    frequency_hz: float
    pitch_name: str
    octave: int
    midi: int  # MIDI pitch (0-127)
    onset_ms: float  # Monotonic timestamp of the onset
    duration_ms: float
    clarity: float = 1.0

    @property
    def label(self) -> str:
        """Pitch name with octave (e.g., 'C4')."""
        return f"{self.pitch_name}{self.octave}"

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return PITCH_NAMES.index(self.pitch_name)

    @property
    def offset_ms(self) -> float:
        return self.onset_ms + self.duration_ms

    @classmethod
    def from_midi(
        cls,
        midi: int,
        onset_ms: float = 0.0,
        duration_ms: float = 500.0,
        clarity: float = 1.0,
        frequency_hz: Optional[float] = None,
    ) -> "Note":
        """Build a note from a MIDI number (handy for tests and imports)."""
        if frequency_hz is None:
            frequency_hz = 440.0 * (2 ** ((midi - 69) / 12.0))
        return cls(
            frequency_hz=frequency_hz,
            pitch_name=PITCH_NAMES[midi % 12],
            octave=(midi // 12) - 1,
            midi=midi,
            onset_ms=onset_ms,
            duration_ms=duration_ms,
            clarity=clarity,
        )

