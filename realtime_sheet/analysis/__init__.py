"""Analysis layer - Low-level signal analysis.

This layer turns raw sample buffers into pitch information:
- Frequency to pitch mapping
- Single-buffer pitch estimation (NSDF, pYIN)
- Per-tick volume and confidence gating
- Tempo estimation for recordings
"""

from .pitch import (
    PitchInfo,
    PitchEstimator,
    NsdfPitchEstimator,
    PyinPitchEstimator,
    frequency_to_pitch,
    frequency_to_midi,
    midi_to_frequency,
)
from .frame import FrameAnalysis, FrameAnalyzer
from .tempo import TempoAnalyzer

__all__ = [
    "PitchInfo",
    "PitchEstimator",
    "NsdfPitchEstimator",
    "PyinPitchEstimator",
    "frequency_to_pitch",
    "frequency_to_midi",
    "midi_to_frequency",
    "FrameAnalysis",
    "FrameAnalyzer",
    "TempoAnalyzer",
]
