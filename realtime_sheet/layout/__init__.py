"""Layout layer - measure packing and staff layout for renderers.

Notes -> [pack into measures] -> [tile into rows] -> StaffLayout -> Renderer
"""

from .packer import Measure, PreviewNote, pack_measures
from .planner import (
    LayoutConfig,
    MeasureLayout,
    StaffLayout,
    plan_layout,
    placeholder_layout,
    validate_notes,
)
from .render import Renderer, TextStaffRenderer, render_staff

__all__ = [
    "Measure",
    "PreviewNote",
    "pack_measures",
    "LayoutConfig",
    "MeasureLayout",
    "StaffLayout",
    "plan_layout",
    "placeholder_layout",
    "validate_notes",
    "Renderer",
    "TextStaffRenderer",
    "render_staff",
]
