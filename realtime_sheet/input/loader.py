"""Audio file loading for replaying recordings through the live pipeline."""

import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(self, target_sr: Optional[int] = 44100):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps the native rate)
        """
        self.target_sr = target_sr

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load a mono audio file.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)
        return audio, int(sr)

    def get_duration(self, audio: np.ndarray, sr: int) -> float:
        """Get duration in seconds."""
        return len(audio) / sr
