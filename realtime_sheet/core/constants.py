"""Global constants for realtime-sheet."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Capture / analysis defaults
DEFAULT_SR = 44100
DEFAULT_WINDOW_SIZE = 2048
DEFAULT_TICK_HZ = 60.0
CLARITY_THRESHOLD = 0.92
MIN_FREQUENCY_HZ = 50.0
MAX_FREQUENCY_HZ = 2000.0

# Segmentation
MIN_NOTE_DURATION_MS = 80.0

# Musical defaults
DEFAULT_TEMPO = 120.0
MIN_TEMPO = 40.0
MAX_TEMPO = 240.0
DEFAULT_KEY_SIGNATURE = "C"
DEFAULT_TIME_SIGNATURE = "4/4"
FALLBACK_DURATION_MS = 500.0  # used when a duration is missing or non-positive

# Inference tuning
KEY_WEIGHT_UNIT_MS = 350.0
OUT_OF_SCALE_PENALTY = 1.1
BEAT_OVERFLOW_TOLERANCE = 0.001
BAR_SNAP_TOLERANCE = 0.08
LEFTOVER_PENALTY = 0.3

# Layout
LAYOUT_WINDOW = 64
STAFF_WIDTH = 700
MIN_MEASURE_WIDTH = 170
STAFF_HEIGHT = 120

# Engravable range
PIANO_MIN = 21  # A0
PIANO_MAX = 108  # C8
