"""Core types and constants for realtime-sheet."""

from .note import Note, Candidate
from .errors import (
    RealtimeSheetError,
    CaptureUnavailableError,
    SessionStateError,
    RenderError,
)
from .constants import (
    PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_WINDOW_SIZE,
    DEFAULT_TEMPO,
    MIN_NOTE_DURATION_MS,
)

__all__ = [
    "Note",
    "Candidate",
    "RealtimeSheetError",
    "CaptureUnavailableError",
    "SessionStateError",
    "RenderError",
    "PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_WINDOW_SIZE",
    "DEFAULT_TEMPO",
    "MIN_NOTE_DURATION_MS",
]
