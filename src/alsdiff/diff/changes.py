"""Change records produced by the project differ."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Rendered in place of a user name that is not set
UNSET_NAME = "None"


class ChangeKind(Enum):
    TRACK_REMOVED = "track_removed"
    TRACK_ADDED = "track_added"
    TRACK_RENAMED = "track_renamed"
    INSTRUMENT_SWAPPED = "instrument_swapped"
    DEVICES_MODIFIED = "devices_modified"
    DEVICE_CHAIN_ADDED = "device_chain_added"
    DEVICE_CHAIN_REMOVED = "device_chain_removed"


@dataclass(frozen=True)
class Change:
    """
    One semantic difference between two versions of a project.

    Attributes:
        kind: Which rule produced the change
        track_id: Id of the track concerned
        track_name: Effective name of the track (the new one when it exists)
        old_value: Previous value of the changed field, if any
        new_value: New value of the changed field, if any
    """
    kind: ChangeKind
    track_id: str
    track_name: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    def describe(self) -> str:
        """Human-readable one-line description."""
        kind = self.kind
        if kind is ChangeKind.TRACK_REMOVED:
            return f"Removed track: {self.track_name}"
        if kind is ChangeKind.TRACK_ADDED:
            return f"Added new track: {self.track_name}"
        if kind is ChangeKind.TRACK_RENAMED:
            old = self.old_value if self.old_value is not None else UNSET_NAME
            new = self.new_value if self.new_value is not None else UNSET_NAME
            return f"Track {self.track_name}: Renamed from '{old}' to '{new}'"
        if kind is ChangeKind.INSTRUMENT_SWAPPED:
            return f"Track {self.track_id}: Swapped instrument {self.old_value} to {self.new_value}"
        if kind is ChangeKind.DEVICES_MODIFIED:
            return f"Track {self.track_name}: Modified internal Rack devices"
        if kind is ChangeKind.DEVICE_CHAIN_ADDED:
            return f"Track {self.track_name}: Added new Rack devices"
        return f"Track {self.track_name}: Removed all Rack devices"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "track_id": self.track_id,
            "track_name": self.track_name,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "description": self.describe(),
        }

    def __str__(self) -> str:
        return self.describe()


def summarize(changes) -> str:
    """Join change descriptions into one newline-separated summary."""
    return "\n".join(change.describe() for change in changes)
