"""Inference layer - Musical understanding of the note log.

Pipeline: Notes -> [Key signature, Time signature] -> MusicalContext
"""

from .key import (
    KeyDetector,
    KeyInfo,
    KeyCandidate,
    FIFTHS_TO_MAJOR_KEY,
    key_signature_to_fifths,
)
from .meter import TimeSignature, TimeSignatureDetector, CANDIDATE_METERS
from .context import MusicalContext, ContextCache, infer_musical_context

__all__ = [
    # Key detection
    "KeyDetector",
    "KeyInfo",
    "KeyCandidate",
    "FIFTHS_TO_MAJOR_KEY",
    "key_signature_to_fifths",
    # Meter
    "TimeSignature",
    "TimeSignatureDetector",
    "CANDIDATE_METERS",
    # Context
    "MusicalContext",
    "ContextCache",
    "infer_musical_context",
]
