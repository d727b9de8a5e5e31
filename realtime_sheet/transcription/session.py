"""Recording session - drives analysis and segmentation once per tick."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..analysis.frame import FrameAnalysis, FrameAnalyzer
from ..analysis.pitch import PitchEstimator
from ..core.constants import (
    CLARITY_THRESHOLD,
    DEFAULT_TEMPO,
    MIN_NOTE_DURATION_MS,
    MIN_FREQUENCY_HZ,
    MAX_FREQUENCY_HZ,
)
from ..core.errors import CaptureUnavailableError, SessionStateError
from ..core.note import Note
from ..inference.context import ContextCache, MusicalContext
from ..input.stream import AudioSource, monotonic_ms
from ..layout.packer import PreviewNote
from ..layout.planner import LayoutConfig, StaffLayout, plan_layout
from .segmenter import LivePitch, NoteSegmenter

logger = logging.getLogger(__name__)


class RecordingState(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class SessionConfig:
    """Tunables for a recording session.

    Attributes:
        tempo: Tempo in BPM used for meter inference and export (default: 120)
        min_note_duration_ms: Shortest candidate kept as a note (default: 80)
        clarity_threshold: Clarity a frame must exceed (default: 0.92)
        min_frequency: Lowest accepted pitch in Hz (default: 50)
        max_frequency: Highest accepted pitch in Hz (default: 2000)
    """

    tempo: float = DEFAULT_TEMPO
    min_note_duration_ms: float = MIN_NOTE_DURATION_MS
    clarity_threshold: float = CLARITY_THRESHOLD
    min_frequency: float = MIN_FREQUENCY_HZ
    max_frequency: float = MAX_FREQUENCY_HZ


@dataclass(frozen=True)
class TickResult:
    frame: FrameAnalysis
    note: Optional[Note]
    live: Optional[LivePitch]


class RecordingSession:
    """Owns the note log and the per-tick state of one recording.

    ``tick`` is the only writer of the note log and candidate; context and
    layout are pure reads over the log. Pausing or stopping drops the open
    candidate instead of finalizing it.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        estimator: Optional[PitchEstimator] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or SessionConfig()
        self.analyzer = FrameAnalyzer(
            estimator=estimator,
            clarity_threshold=self.config.clarity_threshold,
            min_frequency=self.config.min_frequency,
            max_frequency=self.config.max_frequency,
        )
        self.segmenter = NoteSegmenter(self.config.min_note_duration_ms)
        self._clock = clock
        self._source: Optional[AudioSource] = None
        self._notes: List[Note] = []
        self._context = ContextCache()
        self._last_ms: Optional[float] = None

        self.state = RecordingState.IDLE
        self.volume = 0
        self.error: Optional[str] = None

    # ---------- Read side ----------
    @property
    def notes(self) -> Tuple[Note, ...]:
        return tuple(self._notes)

    @property
    def live(self) -> Optional[LivePitch]:
        return self.segmenter.live

    @property
    def current_frequency(self) -> Optional[float]:
        return self.live.frequency_hz if self.live else None

    @property
    def current_note(self) -> Optional[str]:
        return self.live.label if self.live else None

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.RECORDING

    def context(self) -> MusicalContext:
        return self._context.get(self._notes, self.config.tempo)

    def layout(self, config: Optional[LayoutConfig] = None) -> StaffLayout:
        """Layout of the log tail plus the live pitch while recording."""
        preview = None
        if self.is_recording and self.live is not None:
            preview = PreviewNote.from_frequency(self.live.frequency_hz)
        return plan_layout(self._notes, self.context(), preview, config)

    # ---------- Lifecycle ----------
    def start(self, source: AudioSource) -> bool:
        """
        Open ``source`` and begin a fresh recording.

        Returns:
            True if recording started; False if capture was unavailable,
            in which case ``error`` holds the message and the session stays idle
        """
        if self.state in (RecordingState.RECORDING, RecordingState.PAUSED):
            raise SessionStateError(f"Cannot start while {self.state.value}")

        self.error = None
        try:
            source.open()
        except CaptureUnavailableError as e:
            self.error = str(e)
            logger.error("Capture unavailable: %s", e)
            self.state = RecordingState.IDLE
            return False

        self._source = source
        self._clear_log()
        self.state = RecordingState.RECORDING
        logger.info("Recording started at %d Hz", source.sample_rate)
        return True

    def pause(self) -> None:
        self._require(RecordingState.RECORDING, "pause")
        suspend = getattr(self._source, "suspend", None)
        if suspend is not None:
            suspend()
        self._clear_live()
        self.state = RecordingState.PAUSED

    def resume(self) -> None:
        self._require(RecordingState.PAUSED, "resume")
        resume = getattr(self._source, "resume", None)
        if resume is not None:
            resume()
        self.state = RecordingState.RECORDING

    def stop(self) -> None:
        if self.state not in (RecordingState.RECORDING, RecordingState.PAUSED):
            raise SessionStateError(f"Cannot stop while {self.state.value}")
        self._release_source()
        self._clear_live()
        self.state = RecordingState.STOPPED
        logger.info("Recording stopped with %d notes", len(self._notes))

    def reset(self) -> None:
        """Release capture and clear everything, including the note log."""
        self._release_source()
        self._clear_live()
        self._clear_log()
        self.error = None
        self.state = RecordingState.IDLE

    # ---------- Tick ----------
    def tick(self) -> Optional[TickResult]:
        """
        Read one buffer from the source and process it.

        Returns:
            TickResult, or None when not recording or the source is exhausted
        """
        if not self.is_recording or self._source is None:
            return None
        buffer = self._source.read()
        if buffer is None:
            return None
        return self.process(buffer, self._source.sample_rate, self._now())

    def process(
        self, buffer: np.ndarray, sample_rate: int, now_ms: float
    ) -> TickResult:
        """
        Analyse one buffer taken at ``now_ms`` and advance segmentation.

        Only valid while recording. A timestamp earlier than the previous
        frame is clamped to it so the note log stays ordered by onset.

        Raises:
            SessionStateError: If the session is not recording
        """
        self._require(RecordingState.RECORDING, "process")
        if self._last_ms is not None and now_ms < self._last_ms:
            logger.debug(
                "Clock went backwards (%.1f < %.1f ms); clamping", now_ms, self._last_ms
            )
            now_ms = self._last_ms
        self._last_ms = now_ms

        frame = self.analyzer.analyze(buffer, sample_rate, now_ms)
        self.volume = frame.volume

        note = self.segmenter.step(frame)
        if note is not None:
            self._notes.append(note)
            logger.debug("Note %s (%.0f ms)", note.label, note.duration_ms)

        return TickResult(frame=frame, note=note, live=self.segmenter.live)

    # ---------- Helpers ----------
    def _now(self) -> float:
        if self._clock is not None:
            return self._clock()
        source_clock = getattr(self._source, "now_ms", None)
        if source_clock is not None:
            return source_clock()
        return monotonic_ms()

    def _require(self, state: RecordingState, action: str) -> None:
        if self.state is not state:
            raise SessionStateError(f"Cannot {action} while {self.state.value}")

    def _clear_live(self) -> None:
        self.segmenter.discard()
        self.volume = 0

    def _clear_log(self) -> None:
        self._notes.clear()
        self._context.clear()
        self._last_ms = None

    def _release_source(self) -> None:
        if self._source is not None:
            self._source.close()
            self._source = None
