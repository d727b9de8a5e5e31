"""Audio sources that deliver one fixed-size buffer per tick."""

import logging
import threading
import time
from typing import Optional, Protocol

import numpy as np

from ..core.constants import DEFAULT_SR, DEFAULT_WINDOW_SIZE, DEFAULT_TICK_HZ
from ..core.errors import CaptureUnavailableError

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Default session clock."""
    return time.monotonic() * 1000.0


class AudioSource(Protocol):
    """A capture device or recording read once per tick."""

    sample_rate: int

    def open(self) -> None:
        ...

    def read(self) -> Optional[np.ndarray]:
        """Latest analysis window, or None once the source is exhausted."""
        ...

    def close(self) -> None:
        ...


class MicrophoneSource:
    """Live capture through PortAudio (sounddevice).

    The stream callback writes into a ring buffer; ``read`` copies the most
    recent ``window_size`` samples, like an analyser node's time-domain tap.
    """

    def __init__(
        self,
        sample_rate: int = DEFAULT_SR,
        window_size: int = DEFAULT_WINDOW_SIZE,
        device: Optional[int] = None,
    ):
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.device = device
        self._ring = np.zeros(window_size, dtype=np.float32)
        self._lock = threading.Lock()
        self._stream = None

    def open(self) -> None:
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise CaptureUnavailableError(f"Audio capture backend unavailable: {e}") from e

        try:
            stream = sd.InputStream(
                device=self.device,
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                callback=self._callback,
            )
        except sd.PortAudioError as e:
            raise CaptureUnavailableError(f"Microphone access failed: {e}") from e

        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            raise CaptureUnavailableError(f"Microphone could not start: {e}") from e

        self.sample_rate = int(stream.samplerate)
        self._stream = stream
        logger.info("Microphone opened at %d Hz", self.sample_rate)

    def _callback(self, indata, frames, time_info, status):
        if status:
            logger.debug("Input stream status: %s", status)
        block = indata[:, 0]
        with self._lock:
            if block.size >= self.window_size:
                self._ring[:] = block[-self.window_size:]
            else:
                self._ring = np.roll(self._ring, -block.size)
                self._ring[-block.size:] = block

    def read(self) -> Optional[np.ndarray]:
        if self._stream is None:
            return None
        with self._lock:
            return self._ring.copy()

    def close(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None

    def suspend(self) -> None:
        if self._stream is not None:
            self._stream.stop()

    def resume(self) -> None:
        if self._stream is not None:
            self._stream.start()


class ArraySource:
    """Replay an in-memory recording as if it were captured live.

    Each ``read`` advances the play head by one tick worth of samples and
    returns the ``window_size`` samples ending at the play head (zero padded
    at the start). ``now_ms`` follows the play head, so replay is exact and
    independent of wall-clock speed.
    """

    def __init__(
        self,
        audio: np.ndarray,
        sample_rate: int,
        window_size: int = DEFAULT_WINDOW_SIZE,
        tick_hz: float = DEFAULT_TICK_HZ,
    ):
        self.audio = np.asarray(audio, dtype=np.float32)
        self.sample_rate = sample_rate
        self.window_size = window_size
        self.tick_hz = tick_hz
        self._tick = 0
        self._opened = False

    @property
    def hop(self) -> float:
        """Samples per tick."""
        return self.sample_rate / self.tick_hz

    def open(self) -> None:
        self._tick = 0
        self._opened = True

    def now_ms(self) -> float:
        return self._tick * 1000.0 / self.tick_hz

    def read(self) -> Optional[np.ndarray]:
        if not self._opened:
            return None
        end = int(round((self._tick + 1) * self.hop))
        if end > self.audio.size:
            return None
        self._tick += 1

        start = end - self.window_size
        if start >= 0:
            return self.audio[start:end].copy()
        window = np.zeros(self.window_size, dtype=np.float32)
        window[-end:] = self.audio[:end]
        return window

    def close(self) -> None:
        self._opened = False
