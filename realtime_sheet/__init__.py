"""realtime-sheet - Live audio to sheet music transcription.

Architecture Layers:
    1. input/         - Capture devices and recording replay
    2. analysis/      - Pitch mapping, pitch estimation, frame gating
    3. transcription/ - Note segmentation and the recording session
    4. inference/     - Musical context (key signature, time signature)
    5. processing/    - Duration to beat conversion
    6. layout/        - Measure packing and staff layout
    7. output/        - Export (MIDI, MusicXML)
"""

__version__ = "0.3.0"

# Core types
from .core import Note, Candidate

# Analysis layer
from .analysis import FrameAnalyzer, NsdfPitchEstimator, frequency_to_pitch

# Transcription layer
from .transcription import NoteSegmenter, RecordingSession, SessionConfig

# Inference layer
from .inference import MusicalContext, infer_musical_context

# Layout layer
from .layout import pack_measures, plan_layout

# Output layer
from .output import MIDIExporter, MusicXMLExporter

__all__ = [
    # Core
    "Note",
    "Candidate",
    # Analysis
    "FrameAnalyzer",
    "NsdfPitchEstimator",
    "frequency_to_pitch",
    # Transcription
    "NoteSegmenter",
    "RecordingSession",
    "SessionConfig",
    # Inference
    "MusicalContext",
    "infer_musical_context",
    # Layout
    "pack_measures",
    "plan_layout",
    # Output
    "MIDIExporter",
    "MusicXMLExporter",
]
