"""Exception types raised across realtime-sheet."""


class RealtimeSheetError(Exception):
    """Base class for all realtime-sheet errors."""


class CaptureUnavailableError(RealtimeSheetError):
    """Audio capture could not be opened (permission denied, no device)."""


class SessionStateError(RealtimeSheetError):
    """A session transition was requested from an incompatible state."""


class RenderError(RealtimeSheetError):
    """A renderer rejected part of a layout."""
