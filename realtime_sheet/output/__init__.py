"""Output layer - Export to standard formats.

- MIDI files (pretty_midi)
- MusicXML for notation software (music21)
"""

from .midi import MIDIExporter
from .musicxml import MusicXMLExporter

__all__ = [
    "MIDIExporter",
    "MusicXMLExporter",
]
