"""Tests for key and time signature inference."""

import pytest

from realtime_sheet.core import Note, PITCH_NAMES
from realtime_sheet.inference import (
    ContextCache,
    KeyDetector,
    TimeSignature,
    TimeSignatureDetector,
    infer_musical_context,
    key_signature_to_fifths,
)
from realtime_sheet.processing import Quantizer, effective_duration_ms


def create_scale_notes(root: str, octave: int = 4, duration_ms: float = 300.0) -> list:
    """Create one ascending octave of a major scale."""
    root_pc = PITCH_NAMES.index(root)
    base = (octave + 1) * 12 + root_pc
    notes = []
    onset = 0.0
    for interval in (0, 2, 4, 5, 7, 9, 11):
        notes.append(Note.from_midi(base + interval, onset_ms=onset, duration_ms=duration_ms))
        onset += duration_ms
    return notes


def create_rhythm(durations_ms, midi: int = 60) -> list:
    notes = []
    onset = 0.0
    for duration in durations_ms:
        notes.append(Note.from_midi(midi, onset_ms=onset, duration_ms=duration))
        onset += duration
    return notes


class TestMusicalContext:
    """Tests for the combined context."""

    def test_empty_log_defaults(self):
        context = infer_musical_context([])
        assert context.key_signature == "C"
        assert context.key_label == "C major"
        assert context.time_signature == "4/4"

    def test_pure_function(self):
        notes = create_scale_notes("D")
        assert infer_musical_context(notes, 100) == infer_musical_context(notes, 100)

    def test_cache_matches_recomputation(self):
        cache = ContextCache()
        notes = create_scale_notes("G")
        assert cache.get(notes, 120.0) == infer_musical_context(notes, 120.0)

        notes = notes + create_scale_notes("E")
        assert cache.get(notes, 120.0) == infer_musical_context(notes, 120.0)
        assert cache.get(notes, 60.0) == infer_musical_context(notes, 60.0)

    def test_cache_clear(self):
        cache = ContextCache()
        notes = create_scale_notes("E")
        cache.get(notes, 120.0)
        cache.clear()
        assert cache.get([], 120.0).key_signature == "C"


class TestKeyDetection:
    """Tests for key signature detection."""

    def test_c_major_diatonic(self):
        assert KeyDetector().detect(create_scale_notes("C")) == "C"

    @pytest.mark.parametrize("root,expected", [
        ("G", "G"),
        ("D", "D"),
        ("F", "F"),
    ])
    def test_major_scales(self, root, expected):
        assert KeyDetector().detect(create_scale_notes(root)) == expected

    def test_sharps_shift_toward_sharp_side(self):
        c_major = KeyDetector().analyze(create_scale_notes("C"))

        # Emphasize F#, C#, G#, D# with long notes
        sharps = [
            Note.from_midi(m, onset_ms=i * 1000.0, duration_ms=1000.0)
            for i, m in enumerate([66, 61, 68, 63])
        ]
        shifted = KeyDetector().analyze(create_scale_notes("C") + sharps)

        assert shifted.fifths > c_major.fifths
        assert shifted.key_signature in ("D", "A", "E", "B", "F#", "C#")

    def test_e_major(self):
        info = KeyDetector().analyze(create_scale_notes("E"))
        assert info.key_signature == "E"
        assert info.fifths == 4
        assert info.label == "E major"

    def test_ties_resolve_to_lowest_fifths(self):
        # C and G both lie in every key from Ab through G major; Ab comes first
        notes = [Note.from_midi(60), Note.from_midi(67)]
        assert KeyDetector().detect(notes) == "Ab"

    def test_duration_weighting(self):
        detector = KeyDetector()
        notes = [
            Note.from_midi(60, duration_ms=100.0),
            Note.from_midi(60, duration_ms=700.0),
        ]
        histogram = detector._build_pitch_class_distribution(notes)
        # max(1, 100/350) = 1 and 700/350 = 2
        assert histogram[0] == pytest.approx(3.0)

    def test_scores_all_fifteen_keys(self):
        info = KeyDetector().analyze(create_scale_notes("A#"))
        assert len(info.candidates) == 15
        assert info.key_signature == "Bb"

    def test_out_of_scale_penalty(self):
        detector = KeyDetector()
        notes = [Note.from_midi(60, duration_ms=300.0), Note.from_midi(61, duration_ms=300.0)]
        info = detector.analyze(notes)
        by_fifths = {c.fifths: c.score for c in info.candidates}
        # C major: C in scale, C# out of scale
        assert by_fifths[0] == pytest.approx(1.0 - 1.1)

    def test_fifths_lookup(self):
        assert key_signature_to_fifths("C") == 0
        assert key_signature_to_fifths("Eb") == -3
        assert key_signature_to_fifths("C#") == 7
        assert key_signature_to_fifths("H") == 0

    def test_scale_notes(self):
        assert KeyDetector().get_scale_notes("G") == [7, 9, 11, 0, 2, 4, 6]


class TestTimeSignatureDetection:
    """Tests for meter inference at 120 BPM (quarter = 500 ms)."""

    def test_too_few_notes(self):
        assert TimeSignatureDetector().detect(create_rhythm([1000, 500])) == "4/4"

    def test_even_quarters_prefer_first_meter(self):
        assert TimeSignatureDetector().detect(create_rhythm([500] * 6)) == "2/4"

    def test_waltz_pattern(self):
        notes = create_rhythm([1000, 500] * 3)
        assert TimeSignatureDetector().detect(notes) == "3/4"

    def test_common_time_pattern(self):
        notes = create_rhythm([1500, 500] * 2)
        assert TimeSignatureDetector().detect(notes) == "4/4"

    def test_tempo_changes_beat_lengths(self):
        # At 60 BPM these are half-beat notes and the waltz pattern disappears
        notes = create_rhythm([1000, 500] * 3)
        assert TimeSignatureDetector().detect(notes, tempo=60.0) != "3/4"

    def test_non_positive_tempo_falls_back(self):
        notes = create_rhythm([1000, 500] * 3)
        assert TimeSignatureDetector().detect(notes, tempo=0.0) == "3/4"

    def test_overflow_penalty(self):
        # 3 beats into a 2-beat bar: overflow 1 -> penalty 1, carry 3 % 2 = 1
        penalty = TimeSignatureDetector.penalty([3.0], 2.0)
        assert penalty == pytest.approx(1.0 + 1.0 * 0.3)

    def test_snap_resets_position(self):
        assert TimeSignatureDetector.penalty([1.0, 1.0, 1.0, 1.0], 4.0) == 0.0


class TestBeatConversion:
    """Tests for tempo-relative beat rounding."""

    def test_half_beat_rounding(self):
        q = Quantizer(120.0)
        assert q.to_half_beats(500) == 1.0
        assert q.to_half_beats(625) == 1.5  # 1.25 rounds half up
        assert q.to_half_beats(100) == 0.5  # floor at half a beat
        assert q.to_half_beats(0) == 1.0  # missing duration counts as 500 ms

    @pytest.mark.parametrize("duration,expected", [
        (None, 500.0),
        (0.0, 500.0),
        (-20.0, 500.0),
        (float("nan"), 500.0),
        (320.0, 320.0),
    ])
    def test_missing_durations_use_fallback(self, duration, expected):
        assert effective_duration_ms(duration) == expected

    def test_time_signature_capacity(self):
        assert TimeSignature.parse("2/4").capacity == 2.0
        assert TimeSignature.parse("3/4").capacity == 3.0
        assert TimeSignature.parse("4/4").capacity == 4.0
        assert TimeSignature.parse("6/8").capacity == 3.0
        assert str(TimeSignature.parse(" 6/8 ")) == "6/8"

    @pytest.mark.parametrize("bad", ["4", "4/0", "x/4", "3/5", "0/4"])
    def test_invalid_time_signature(self, bad):
        with pytest.raises(ValueError):
            TimeSignature.parse(bad)
