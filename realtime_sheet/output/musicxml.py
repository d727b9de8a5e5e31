"""MusicXML export functionality."""

from typing import Optional, Sequence
from pathlib import Path

from ..core.constants import DEFAULT_TEMPO, DEFAULT_TIME_SIGNATURE
from ..core.note import Note
from ..inference.context import MusicalContext
from ..inference.key import key_signature_to_fifths
from ..processing.quantize import Quantizer
from .midi import clarity_to_velocity


class MusicXMLExporter:
    """Export the note log to MusicXML format via music21."""

    def __init__(
        self,
        tempo: float = DEFAULT_TEMPO,
        divisions: int = 4,
        title: str = "Realtime Music Sheet",
    ):
        """
        Initialize MusicXMLExporter.

        Args:
            tempo: Tempo in BPM
            divisions: Duration grid per quarter note (4 = sixteenths)
            title: Score title
        """
        self.tempo = tempo
        self.divisions = divisions
        self.title = title

    def export(
        self,
        notes: Sequence[Note],
        output_path: str,
        context: Optional[MusicalContext] = None,
    ) -> None:
        """
        Export notes to MusicXML file.

        Args:
            notes: Note log
            output_path: Path to output MusicXML file
            context: Key and time signature for the first measure
        """
        score = self.notes_to_score(notes, context)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        score.write("musicxml", fp=str(output_path))

    def notes_to_score(
        self,
        notes: Sequence[Note],
        context: Optional[MusicalContext] = None,
    ):
        """Build a music21 Score without saving."""
        try:
            from music21 import stream, note as m21_note, tempo as m21_tempo
            from music21 import meter, metadata, clef, key as m21_key
        except ImportError:
            raise ImportError("music21 is required for MusicXML export")

        key_signature = context.key_signature if context else "C"
        time_signature = context.time_signature if context else DEFAULT_TIME_SIGNATURE

        score = stream.Score()
        score.metadata = metadata.Metadata()
        score.metadata.title = self.title

        part = stream.Part()
        part.partName = "Voice"
        part.append(clef.TrebleClef())
        part.append(m21_key.KeySignature(key_signature_to_fifths(key_signature)))
        part.append(meter.TimeSignature(time_signature))
        part.append(m21_tempo.MetronomeMark(number=self.tempo))

        quantizer = Quantizer(self.tempo)
        for n in notes:
            m21_n = m21_note.Note(n.label)
            m21_n.duration.quarterLength = (
                quantizer.to_divisions(n.duration_ms, self.divisions) / self.divisions
            )
            m21_n.volume.velocity = clarity_to_velocity(n.clarity)
            part.append(m21_n)

        score.append(part)
        return score
