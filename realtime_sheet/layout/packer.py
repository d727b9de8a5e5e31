"""Measure packing - group notes into beat-bounded measures.

Greedy online packing: a note that would overflow a non-empty measure
closes it first, and a measure that reaches its capacity is closed right
after the note that filled it. A single note longer than a whole measure is
never split; it sits alone in its own (over-full) measure. The in-progress
note, when shown, joins the last measure if it fits there and otherwise
opens a trailing measure of its own.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..analysis.pitch import frequency_to_pitch
from ..core.constants import BEAT_OVERFLOW_TOLERANCE, LAYOUT_WINDOW
from ..core.note import Note
from ..inference.meter import TimeSignature
from ..processing.quantize import beat_weight

PREVIEW_BEATS = 1.0


@dataclass(frozen=True)
class PreviewNote:
    """The still-sounding pitch drawn at the end of the staff."""

    pitch_name: str
    octave: int
    midi: int
    beats: float = PREVIEW_BEATS

    @property
    def label(self) -> str:
        return f"{self.pitch_name}{self.octave}"

    @classmethod
    def from_frequency(cls, frequency_hz: float) -> "PreviewNote":
        pitch = frequency_to_pitch(frequency_hz)
        return cls(pitch.pitch_name, pitch.octave, pitch.midi)


@dataclass(frozen=True)
class Measure:
    notes: Tuple[Note, ...]
    beats: float  # Sum of note beat weights, preview included
    capacity: float
    preview: Optional[PreviewNote] = None

    @property
    def is_full(self) -> bool:
        return self.beats >= self.capacity - BEAT_OVERFLOW_TOLERANCE

    def __len__(self) -> int:
        return len(self.notes) + (1 if self.preview is not None else 0)


def pack_measures(
    notes: Sequence[Note],
    time_signature: str,
    preview: Optional[PreviewNote] = None,
    window: int = LAYOUT_WINDOW,
) -> List[Measure]:
    """
    Pack the most recent notes into measures.

    Args:
        notes: Note log (only the last ``window`` notes are laid out)
        time_signature: Meter string such as '3/4'
        preview: Optional in-progress note appended at the end
        window: Maximum number of notes to lay out

    Returns:
        Measures in order; an empty list when there is nothing to show
    """
    capacity = TimeSignature.parse(time_signature).capacity
    tail = list(notes[-window:]) if window > 0 else []

    measures: List[Measure] = []
    current: List[Note] = []
    beats = 0.0

    for note in tail:
        weight = beat_weight(note.duration_ms)
        if current and beats + weight > capacity + BEAT_OVERFLOW_TOLERANCE:
            measures.append(Measure(tuple(current), beats, capacity))
            current, beats = [], 0.0

        current.append(note)
        beats += weight

        if beats >= capacity - BEAT_OVERFLOW_TOLERANCE:
            measures.append(Measure(tuple(current), beats, capacity))
            current, beats = [], 0.0

    if current:
        measures.append(Measure(tuple(current), beats, capacity))

    if preview is not None:
        last = measures[-1] if measures else None
        if last is not None and last.beats + preview.beats <= capacity + BEAT_OVERFLOW_TOLERANCE:
            measures[-1] = Measure(last.notes, last.beats + preview.beats, capacity, preview)
        else:
            measures.append(Measure((), preview.beats, capacity, preview))

    return measures
