"""Note segmentation - turn a gated pitch stream into discrete notes.

The segmenter tracks at most one candidate note. A confident frame with the
candidate's label extends it; a different label or an unvoiced frame closes
it. A closed candidate becomes a Note only if it lasted at least
``min_duration_ms``, which filters detector jitter and octave flicker at
tick rate while keeping genuine onsets.

    IDLE --confident--> TRACKING --same label--> TRACKING
      ^                    |  \\--new label--> (finalize) TRACKING
      +------unvoiced------+ (finalize)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..analysis.frame import FrameAnalysis
from ..analysis.pitch import frequency_to_pitch
from ..core.constants import MIN_NOTE_DURATION_MS
from ..core.note import Candidate, Note


class SegmenterPhase(Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class LivePitch:
    """What the display shows for the current tick."""

    frequency_hz: float
    label: str


@dataclass(frozen=True)
class SegmenterState:
    candidate: Optional[Candidate] = None

    @property
    def phase(self) -> SegmenterPhase:
        if self.candidate is None:
            return SegmenterPhase.IDLE
        return SegmenterPhase.TRACKING


def _close(
    candidate: Optional[Candidate], now_ms: float, min_duration_ms: float
) -> Optional[Note]:
    if candidate is None:
        return None
    if now_ms - candidate.onset_ms >= min_duration_ms:
        return candidate.finalize(now_ms)
    return None


def advance(
    state: SegmenterState,
    frame: FrameAnalysis,
    min_duration_ms: float = MIN_NOTE_DURATION_MS,
) -> Tuple[SegmenterState, Optional[Note]]:
    """
    Advance the segmenter by one frame.

    Args:
        state: Current state
        frame: Gated analysis of the current tick
        min_duration_ms: Shortest candidate kept as a note

    Returns:
        Tuple of (next state, finalized note or None)
    """
    now = frame.timestamp_ms

    if not frame.confident:
        return SegmenterState(), _close(state.candidate, now, min_duration_ms)

    pitch = frequency_to_pitch(frame.frequency_hz)
    if state.candidate is not None and state.candidate.label == pitch.label:
        return state, None

    emitted = _close(state.candidate, now, min_duration_ms)
    candidate = Candidate(
        frequency_hz=frame.frequency_hz,
        pitch_name=pitch.pitch_name,
        octave=pitch.octave,
        midi=pitch.midi,
        onset_ms=now,
        clarity=frame.clarity,
    )
    return SegmenterState(candidate), emitted


def live_pitch(frame: FrameAnalysis) -> Optional[LivePitch]:
    """Display value for a frame: the confident pitch, or None."""
    if not frame.confident:
        return None
    return LivePitch(frame.frequency_hz, frequency_to_pitch(frame.frequency_hz).label)


class NoteSegmenter:
    """Stateful wrapper around :func:`advance` used by the tick loop."""

    def __init__(self, min_duration_ms: float = MIN_NOTE_DURATION_MS):
        self.min_duration_ms = min_duration_ms
        self.state = SegmenterState()
        self.live: Optional[LivePitch] = None

    @property
    def phase(self) -> SegmenterPhase:
        return self.state.phase

    @property
    def candidate(self) -> Optional[Candidate]:
        return self.state.candidate

    def step(self, frame: FrameAnalysis) -> Optional[Note]:
        """Consume one frame; return a note when one is finalized."""
        self.state, note = advance(self.state, frame, self.min_duration_ms)
        self.live = live_pitch(frame)
        return note

    def discard(self) -> None:
        """Drop the open candidate without emitting it and clear the display."""
        self.state = SegmenterState()
        self.live = None
