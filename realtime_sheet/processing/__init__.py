"""Processing layer - Note duration handling.

- Tempo-relative beat conversion (half-beat grid, MusicXML divisions)
- Fixed-threshold notation values for layout
"""

from .quantize import Quantizer, beat_weight, effective_duration_ms

__all__ = [
    "Quantizer",
    "beat_weight",
    "effective_duration_ms",
]
