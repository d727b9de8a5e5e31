"""Render boundary: hand a StaffLayout to a renderer, degrade on rejection."""

import logging
from typing import Protocol, TypeVar

from rich.text import Text

from ..core.errors import RenderError
from ..inference.context import MusicalContext
from ..processing.quantize import beat_weight
from .planner import StaffLayout, LayoutConfig, placeholder_layout

logger = logging.getLogger(__name__)

T = TypeVar("T", covariant=True)

DURATION_SYMBOLS = {4.0: "w", 2.0: "h", 1.0: "q", 0.5: "8"}
CLEF_SYMBOLS = {"treble": "G-clef", "bass": "F-clef"}


class Renderer(Protocol[T]):
    def render(self, layout: StaffLayout) -> T:
        """Draw a layout; raise RenderError for anything it cannot draw."""
        ...


def render_staff(renderer: Renderer[T], layout: StaffLayout) -> T:
    """
    Render a layout, substituting an empty staff if the renderer rejects it.

    The note log is never consulted here, so a failed pass leaves it intact.
    """
    try:
        return renderer.render(layout)
    except RenderError as e:
        logger.warning("Renderer rejected layout, drawing empty staff: %s", e)
        context = MusicalContext(
            key_signature=layout.key_signature,
            key_label=f"{layout.key_signature} major",
            time_signature=layout.time_signature,
        )
        config = LayoutConfig(clef=layout.clef)
        return renderer.render(placeholder_layout(context, config, reason=str(e)))


class TextStaffRenderer:
    """Render a layout as one line of text per staff row.

    Finished notes are plain, the in-progress note is highlighted. Each row
    starts with its clef; the first measure also shows key and meter.
    """

    def __init__(
        self,
        preview_style: str = "bold magenta",
        min_midi: int = 0,
        max_midi: int = 127,
    ):
        self.preview_style = preview_style
        self.min_midi = min_midi
        self.max_midi = max_midi

    def render(self, layout: StaffLayout) -> Text:
        text = Text()
        if layout.is_empty:
            text.append(self._header(layout.clef, layout.key_signature, layout.time_signature))
            text.append(" ||")
            if layout.degraded:
                text.append("  (staff unavailable)", style="dim")
            return text

        current_row = 0
        for placed in layout.measures:
            if placed.row != current_row:
                text.append(" |\n")
                current_row = placed.row
            if placed.clef is not None:
                text.append(
                    self._header(placed.clef, placed.key_signature, placed.time_signature)
                )
            text.append(" |")

            for note in placed.measure.notes:
                self._check_range(note.midi, note.label)
                symbol = DURATION_SYMBOLS[beat_weight(note.duration_ms)]
                text.append(f" {note.label}:{symbol}")

            preview = placed.measure.preview
            if preview is not None:
                self._check_range(preview.midi, preview.label)
                text.append(f" {preview.label}:q", style=self.preview_style)

        text.append(" |")
        return text

    def _check_range(self, midi: int, label: str) -> None:
        if not self.min_midi <= midi <= self.max_midi:
            raise RenderError(f"Cannot draw {label}: MIDI {midi} out of range")

    @staticmethod
    def _header(clef, key_signature, time_signature) -> str:
        parts = [CLEF_SYMBOLS.get(clef, clef)]
        if key_signature is not None:
            parts.append(key_signature)
        if time_signature is not None:
            parts.append(time_signature)
        return " ".join(parts)
