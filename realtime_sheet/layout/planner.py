"""Staff layout planning: place packed measures on rows."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..core.constants import (
    LAYOUT_WINDOW,
    STAFF_WIDTH,
    MIN_MEASURE_WIDTH,
    STAFF_HEIGHT,
    PIANO_MIN,
    PIANO_MAX,
)
from ..core.note import Note
from ..inference.context import MusicalContext
from .packer import Measure, PreviewNote, pack_measures

logger = logging.getLogger(__name__)


@dataclass
class LayoutConfig:
    """Configuration for staff layout.

    Attributes:
        width: Drawable width of one staff row in pixels (default: 700)
        min_measure_width: Narrowest measure; sets measures per row (default: 170)
        row_height: Vertical distance between rows (default: 120)
        margin_x: Left offset of every row (default: 10)
        margin_y: Top offset of the first row (default: 20)
        clef: Clef drawn at the start of each row (default: "treble")
        window: Number of most recent notes laid out (default: 64)
        min_midi: Lowest MIDI pitch the renderer can engrave (default: 21)
        max_midi: Highest MIDI pitch the renderer can engrave (default: 108)
    """

    width: int = STAFF_WIDTH
    min_measure_width: int = MIN_MEASURE_WIDTH
    row_height: int = STAFF_HEIGHT
    margin_x: int = 10
    margin_y: int = 20
    clef: str = "treble"
    window: int = LAYOUT_WINDOW
    min_midi: int = PIANO_MIN
    max_midi: int = PIANO_MAX

    @property
    def measures_per_row(self) -> int:
        return max(1, self.width // max(1, self.min_measure_width))


@dataclass(frozen=True)
class MeasureLayout:
    """A measure with its drawing origin and the modifiers it carries."""

    measure: Measure
    index: int
    row: int
    x: float
    y: float
    width: float
    clef: Optional[str] = None
    key_signature: Optional[str] = None
    time_signature: Optional[str] = None


@dataclass
class StaffLayout:
    """Everything a renderer needs for one pass."""

    key_signature: str
    time_signature: str
    clef: str
    measures: List[MeasureLayout] = field(default_factory=list)
    degraded: bool = False
    reason: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.measures

    @property
    def rows(self) -> int:
        return max((m.row for m in self.measures), default=-1) + 1


def placeholder_layout(
    context: MusicalContext,
    config: Optional[LayoutConfig] = None,
    reason: Optional[str] = None,
) -> StaffLayout:
    """Empty staff carrying only clef, key and time signature."""
    config = config or LayoutConfig()
    return StaffLayout(
        key_signature=context.key_signature,
        time_signature=context.time_signature,
        clef=config.clef,
        degraded=reason is not None,
        reason=reason,
    )


def validate_notes(
    notes: Sequence[Note],
    preview: Optional[PreviewNote],
    config: LayoutConfig,
) -> Optional[str]:
    """Return why the notes cannot be engraved, or None if they can."""
    for note in notes:
        if not config.min_midi <= note.midi <= config.max_midi:
            return f"{note.label} (MIDI {note.midi}) is outside the engravable range"
        if not note.duration_ms > 0:
            return f"{note.label} at {note.onset_ms:.0f} ms has non-positive duration"
    if preview is not None and not config.min_midi <= preview.midi <= config.max_midi:
        return f"preview {preview.label} is outside the engravable range"
    return None


def plan_layout(
    notes: Sequence[Note],
    context: MusicalContext,
    preview: Optional[PreviewNote] = None,
    config: Optional[LayoutConfig] = None,
) -> StaffLayout:
    """
    Lay out the tail of the note log.

    Args:
        notes: Note log
        context: Inferred key and time signature
        preview: Optional in-progress note
        config: Layout configuration

    Returns:
        StaffLayout; a degraded placeholder if any note fails validation
    """
    config = config or LayoutConfig()
    tail = list(notes[-config.window:]) if config.window > 0 else []

    problem = validate_notes(tail, preview, config)
    if problem is not None:
        logger.warning("Layout degraded to an empty staff: %s", problem)
        return placeholder_layout(context, config, reason=problem)

    measures = pack_measures(tail, context.time_signature, preview, window=config.window)

    per_row = config.measures_per_row
    measure_width = config.width / per_row

    layout = StaffLayout(
        key_signature=context.key_signature,
        time_signature=context.time_signature,
        clef=config.clef,
    )
    for index, measure in enumerate(measures):
        row, column = divmod(index, per_row)
        first_in_row = column == 0
        first_overall = index == 0
        layout.measures.append(
            MeasureLayout(
                measure=measure,
                index=index,
                row=row,
                x=config.margin_x + column * measure_width,
                y=config.margin_y + row * config.row_height,
                width=measure_width,
                clef=config.clef if first_in_row else None,
                key_signature=context.key_signature if first_overall else None,
                time_signature=context.time_signature if first_overall else None,
            )
        )
    return layout
