"""MIDI export functionality."""

import pretty_midi
from typing import Optional, Sequence
from pathlib import Path

from ..core.constants import DEFAULT_TEMPO
from ..core.note import Note
from ..inference.context import MusicalContext
from ..inference.key import key_signature_to_fifths, tonic_pitch_class
from ..inference.meter import TimeSignature


def clarity_to_velocity(clarity: float) -> int:
    """Map detector clarity (0-1) to MIDI velocity."""
    return int(max(1, min(127, round(min(1.0, clarity) * 127))))


class MIDIExporter:
    """Export the note log to MIDI format."""

    def __init__(
        self,
        tempo: float = DEFAULT_TEMPO,
        instrument_name: str = "Voice",
        instrument_program: int = 0,
        preserve_gaps: bool = False,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
            preserve_gaps: Keep the silences between notes; by default notes
                are written back to back
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program
        self.preserve_gaps = preserve_gaps

    def export(
        self,
        notes: Sequence[Note],
        output_path: str,
        context: Optional[MusicalContext] = None,
    ) -> None:
        """
        Export notes to MIDI file.

        Args:
            notes: Note log
            output_path: Path to output MIDI file
            context: Key and time signature to embed, if known
        """
        midi = self.notes_to_pretty_midi(notes, context)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def notes_to_pretty_midi(
        self,
        notes: Sequence[Note],
        context: Optional[MusicalContext] = None,
    ) -> pretty_midi.PrettyMIDI:
        """Convert notes to PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        if context is not None:
            fifths = key_signature_to_fifths(context.key_signature)
            midi.key_signature_changes.append(
                pretty_midi.KeySignature(key_number=tonic_pitch_class(fifths), time=0.0)
            )
            meter = TimeSignature.parse(context.time_signature)
            midi.time_signature_changes.append(
                pretty_midi.TimeSignature(meter.numerator, meter.denominator, 0.0)
            )

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        origin = notes[0].onset_ms if notes else 0.0
        cursor = 0.0
        for note in notes:
            start = (note.onset_ms - origin) / 1000.0 if self.preserve_gaps else cursor
            end = start + note.duration_ms / 1000.0
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=clarity_to_velocity(note.clarity),
                    pitch=note.midi,
                    start=start,
                    end=end,
                )
            )
            cursor = end

        midi.instruments.append(instrument)
        return midi
