"""Transcription layer - live note detection.

This layer converts the per-tick pitch stream into discrete note events:
- Segmentation state machine (candidate tracking with minimum duration)
- Recording session (tick loop, pause/resume/stop/reset, note log)
"""

from .segmenter import (
    LivePitch,
    NoteSegmenter,
    SegmenterPhase,
    SegmenterState,
    advance,
    live_pitch,
)
from .session import RecordingSession, RecordingState, SessionConfig, TickResult

__all__ = [
    "LivePitch",
    "NoteSegmenter",
    "SegmenterPhase",
    "SegmenterState",
    "advance",
    "live_pitch",
    "RecordingSession",
    "RecordingState",
    "SessionConfig",
    "TickResult",
]
