"""Tests for the recording session lifecycle and tick loop."""

import numpy as np
import pytest

from realtime_sheet.core import CaptureUnavailableError, SessionStateError
from realtime_sheet.input import ArraySource
from realtime_sheet.inference import infer_musical_context
from realtime_sheet.transcription import RecordingSession, RecordingState, SessionConfig

SR = 44100
TICK_MS = 1000.0 / 60.0
A4 = (440.0, 0.99)
C5 = (523.25, 0.99)
SILENCE = (0.0, 0.0)


class SequenceEstimator:
    """Replays scripted (frequency, clarity) pairs, then reports silence."""

    def __init__(self, outputs):
        self.outputs = list(outputs)

    def estimate(self, buffer, sample_rate):
        if self.outputs:
            return self.outputs.pop(0)
        return SILENCE


class FailingSource:
    sample_rate = SR

    def open(self):
        raise CaptureUnavailableError("no microphone")

    def read(self):
        return None

    def close(self):
        pass


def create_session(outputs, seconds: float = 2.0, **config) -> RecordingSession:
    session = RecordingSession(SessionConfig(**config), estimator=SequenceEstimator(outputs))
    session.start(ArraySource(np.zeros(int(SR * seconds), dtype=np.float32), SR))
    return session


def run_ticks(session: RecordingSession, count: int) -> None:
    for _ in range(count):
        session.tick()


class TestLifecycle:
    """Tests for state transitions."""

    def test_start(self):
        session = create_session([])
        assert session.state is RecordingState.RECORDING
        assert session.is_recording
        assert session.error is None

    def test_capture_unavailable(self):
        session = RecordingSession()
        assert session.start(FailingSource()) is False
        assert session.state is RecordingState.IDLE
        assert "no microphone" in session.error
        assert session.tick() is None

    def test_start_twice(self):
        session = create_session([])
        with pytest.raises(SessionStateError):
            session.start(ArraySource(np.zeros(SR), SR))

    @pytest.mark.parametrize("action", ["pause", "resume", "stop"])
    def test_invalid_from_idle(self, action):
        with pytest.raises(SessionStateError):
            getattr(RecordingSession(), action)()

    def test_resume_while_recording(self):
        session = create_session([])
        with pytest.raises(SessionStateError):
            session.resume()

    def test_pause_and_resume(self):
        session = create_session([A4] * 5)
        run_ticks(session, 5)
        assert session.segmenter.candidate is not None

        session.pause()
        assert session.state is RecordingState.PAUSED
        assert session.segmenter.candidate is None
        assert session.live is None
        assert session.volume == 0
        assert session.tick() is None

        session.resume()
        assert session.is_recording
        run_ticks(session, 3)
        # The discarded candidate never reaches the log
        assert session.notes == ()

    def test_stop_keeps_log_and_drops_candidate(self):
        session = create_session([A4] * 12 + [SILENCE] + [C5] * 12)
        run_ticks(session, 25)
        assert session.current_note == "C5"

        session.stop()
        assert session.state is RecordingState.STOPPED
        assert [n.label for n in session.notes] == ["A4"]
        assert session.current_note is None
        assert session.tick() is None

    def test_stop_from_pause(self):
        session = create_session([])
        session.pause()
        session.stop()
        assert session.state is RecordingState.STOPPED

    def test_restart_clears_log(self):
        session = create_session([A4] * 12 + [SILENCE])
        run_ticks(session, 13)
        session.stop()
        assert len(session.notes) == 1

        session.start(ArraySource(np.zeros(SR), SR))
        assert session.notes == ()

    def test_reset(self):
        session = create_session([A4] * 12 + [SILENCE] + [A4] * 3)
        run_ticks(session, 16)
        session.reset()
        assert session.state is RecordingState.IDLE
        assert session.notes == ()
        assert session.live is None
        assert session.context().key_signature == "C"


class TestTick:
    """Tests for per-tick processing."""

    def test_note_timing_follows_source(self):
        session = create_session([A4] * 12 + [SILENCE])
        run_ticks(session, 13)
        (note,) = session.notes
        assert note.label == "A4"
        assert note.onset_ms == pytest.approx(TICK_MS)
        assert note.duration_ms == pytest.approx(12 * TICK_MS)

    def test_tick_result(self):
        session = create_session([A4] * 12 + [SILENCE])
        first = session.tick()
        assert first.frame.confident
        assert first.note is None
        assert first.live.label == "A4"

        run_ticks(session, 11)
        last = session.tick()
        assert last.note is not None
        assert last.live is None

    def test_live_display(self):
        session = create_session([C5])
        session.tick()
        assert session.current_note == "C5"
        assert session.current_frequency == pytest.approx(523.25)

    def test_exhausted_source(self):
        session = create_session([], seconds=0.1)
        results = [session.tick() for _ in range(10)]
        assert results[-1] is None
        assert session.is_recording

    def test_injected_clock(self):
        times = iter([100.0, 150.0, 300.0])
        session = RecordingSession(
            estimator=SequenceEstimator([A4, A4, SILENCE]), clock=lambda: next(times)
        )
        session.start(ArraySource(np.zeros(SR), SR))
        run_ticks(session, 3)
        (note,) = session.notes
        assert note.onset_ms == 100.0
        assert note.duration_ms == 200.0

    def test_process_buffer(self):
        session = create_session([A4, SILENCE])
        buffer = np.zeros(2048)
        session.process(buffer, SR, 0.0)
        result = session.process(buffer, SR, 100.0)
        assert result.note.label == "A4"
        assert len(session.notes) == 1

    @pytest.mark.parametrize("action", [None, "pause", "stop"])
    def test_process_requires_recording(self, action):
        session = RecordingSession(estimator=SequenceEstimator([C5, SILENCE]))
        if action is not None:
            session.start(ArraySource(np.zeros(SR), SR))
            getattr(session, action)()
        buffer = np.zeros(2048)
        with pytest.raises(SessionStateError):
            session.process(buffer, SR, 1000.0)
        with pytest.raises(SessionStateError):
            session.process(buffer, SR, 1200.0)
        assert session.notes == ()

    def test_backwards_timestamps_keep_log_ordered(self):
        session = create_session([A4, SILENCE, C5, SILENCE])
        buffer = np.zeros(2048)
        for now_ms in (1000.0, 1200.0, 500.0, 1400.0):
            session.process(buffer, SR, now_ms)

        assert [n.label for n in session.notes] == ["A4", "C5"]
        assert [n.onset_ms for n in session.notes] == [1000.0, 1200.0]
        assert session.notes[1].duration_ms == 200.0

    def test_backwards_clock_keeps_log_ordered(self):
        times = iter([1000.0, 1200.0, 500.0, 700.0])
        session = RecordingSession(
            estimator=SequenceEstimator([A4, SILENCE, C5, SILENCE]),
            clock=lambda: next(times),
        )
        session.start(ArraySource(np.zeros(SR), SR))
        run_ticks(session, 4)

        onsets = [n.onset_ms for n in session.notes]
        assert onsets == sorted(onsets)
        assert [n.label for n in session.notes] == ["A4"]

    def test_min_duration_from_config(self):
        session = create_session([A4] * 12 + [SILENCE], min_note_duration_ms=250.0)
        run_ticks(session, 13)
        assert session.notes == ()


class TestReadSide:
    """Tests for context and layout reads."""

    def test_context_matches_recomputation(self):
        outputs = []
        for pitch in (A4, C5, A4, C5):
            outputs += [pitch] * 12 + [SILENCE]
        session = create_session(outputs, tempo=90.0)
        run_ticks(session, len(outputs))

        assert len(session.notes) == 4
        assert session.context() == infer_musical_context(session.notes, 90.0)

    def test_layout_shows_preview_while_recording(self):
        session = create_session([A4] * 12 + [SILENCE] + [C5] * 3)
        run_ticks(session, 16)

        layout = session.layout()
        last = layout.measures[-1].measure
        assert last.notes[-1].label == "A4"
        assert last.preview is not None
        assert last.preview.label == "C5"

    def test_layout_without_preview_after_stop(self):
        session = create_session([A4] * 12 + [SILENCE] + [C5] * 3)
        run_ticks(session, 16)
        session.stop()

        layout = session.layout()
        assert all(m.measure.preview is None for m in layout.measures)
        assert len(layout.measures) == 1

    def test_empty_layout(self):
        layout = RecordingSession().layout()
        assert layout.is_empty
        assert layout.time_signature == "4/4"


class TestLivePipeline:
    """End-to-end: real audio through the default estimator."""

    def test_sustained_tone(self):
        t = np.arange(SR // 2) / SR
        tone = 0.5 * np.sin(2 * np.pi * 440.0 * t)
        audio = np.concatenate([tone, np.zeros(SR // 2)]).astype(np.float32)

        session = RecordingSession()
        session.start(ArraySource(audio, SR))
        while session.tick() is not None:
            pass
        session.stop()

        assert session.notes
        assert {n.label for n in session.notes} == {"A4"}
        longest = max(session.notes, key=lambda n: n.duration_ms)
        assert 400.0 < longest.duration_ms < 600.0
