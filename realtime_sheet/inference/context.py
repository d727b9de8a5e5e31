"""Musical context: key and time signature of the whole note log."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.constants import DEFAULT_TEMPO
from ..core.note import Note
from .key import KeyDetector
from .meter import TimeSignatureDetector


@dataclass(frozen=True)
class MusicalContext:
    key_signature: str
    key_label: str
    time_signature: str


def infer_musical_context(
    notes: Sequence[Note], tempo: float = DEFAULT_TEMPO
) -> MusicalContext:
    """Recompute key and time signature from scratch for ``notes``."""
    key_info = KeyDetector().analyze(notes)
    return MusicalContext(
        key_signature=key_info.key_signature,
        key_label=key_info.label,
        time_signature=TimeSignatureDetector().detect(notes, tempo),
    )


class ContextCache:
    """Memoize :func:`infer_musical_context` on an append-only note log.

    The log only grows during a session, so (length, tempo) identifies its
    content; call :meth:`clear` whenever the log is reset.
    """

    def __init__(self):
        self._key: Optional[Tuple[int, float]] = None
        self._value: Optional[MusicalContext] = None

    def get(self, notes: Sequence[Note], tempo: float) -> MusicalContext:
        key = (len(notes), tempo)
        if self._value is None or key != self._key:
            self._value = infer_musical_context(notes, tempo)
            self._key = key
        return self._value

    def clear(self) -> None:
        self._key = None
        self._value = None
