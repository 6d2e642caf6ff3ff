"""
Exception types raised by alsdiff.

Transport problems (missing files, broken gzip streams, XML syntax errors)
are not wrapped: they propagate as the standard library raises them.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .parser.diagnostics import ParseDiagnostics


class AlsDiffError(Exception):
    """Base class for all alsdiff errors."""


class MalformedProjectError(AlsDiffError):
    """Raised when a document has more structural anomalies than allowed."""

    def __init__(self, message: str, diagnostics: Optional["ParseDiagnostics"] = None):
        super().__init__(message)
        self.diagnostics = diagnostics


class DuplicateTrackIdError(AlsDiffError, ValueError):
    """Raised when one side of a diff holds two tracks with the same id."""

    def __init__(self, track_id: str, side: str):
        super().__init__(f"Duplicate track id '{track_id}' in {side} project")
        self.track_id = track_id
        self.side = side


class SnapshotError(AlsDiffError):
    """Raised when a stored project snapshot cannot be read."""
