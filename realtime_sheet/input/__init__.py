"""Input layer - capture devices and recording replay."""

from .loader import AudioLoader
from .stream import AudioSource, MicrophoneSource, ArraySource, monotonic_ms

__all__ = [
    "AudioLoader",
    "AudioSource",
    "MicrophoneSource",
    "ArraySource",
    "monotonic_ms",
]
