"""
Model node definitions for Ableton Live projects.

A parsed project is a strict tree: a ProjectNode owns its tracks, a track
owns an optional list of rack branches, and every branch owns an optional
list of nested branches. There are no parent references.
"""

from typing import ClassVar, Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from ..errors import DuplicateTrackIdError


class NodeType(Enum):
    """Enumeration of model node types."""
    PROJECT = "project"
    TRACK = "track"
    BRANCH = "branch"


@dataclass
class BranchNode:
    """
    A branch of a rack device (drum pad chain, instrument or effect chain).

    Branches carry no identifier in the project file, so two versions of the
    same branch can only be matched by position or content.
    """
    branch_type: str
    effective_name: str = ""
    user_name: Optional[str] = None
    branches: Optional[List["BranchNode"]] = None

    node_type: ClassVar[NodeType] = NodeType.BRANCH

    @property
    def children(self) -> List["BranchNode"]:
        return self.branches or []

    @property
    def display_name(self) -> str:
        """User name if the user set one, otherwise the effective name."""
        return self.user_name if self.user_name is not None else self.effective_name

    def __repr__(self) -> str:
        return f"branch(type={self.branch_type}, name={self.display_name!r}, children={len(self.children)})"


@dataclass
class TrackNode:
    """Node representing an audio, MIDI or return track."""
    track_type: str
    id: str
    effective_name: str = ""
    user_name: Optional[str] = None
    branches: Optional[List[BranchNode]] = None

    node_type: ClassVar[NodeType] = NodeType.TRACK

    @property
    def children(self) -> List[BranchNode]:
        return self.branches or []

    @property
    def display_name(self) -> str:
        return self.user_name if self.user_name is not None else self.effective_name

    def __repr__(self) -> str:
        return f"track(id={self.id}, type={self.track_type}, name={self.display_name!r})"


@dataclass
class ProjectNode:
    """Root node holding the tracks of one parsed project, in document order."""
    tracks: List[TrackNode] = field(default_factory=list)

    node_type: ClassVar[NodeType] = NodeType.PROJECT

    @property
    def children(self) -> List[TrackNode]:
        return self.tracks

    def find_track(self, track_id: str) -> Optional[TrackNode]:
        """Return the track with the given id, or None."""
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None

    def track_map(self, side: str = "project") -> Dict[str, TrackNode]:
        """
        Map track ids to tracks.

        Args:
            side: Label used in the error message ("old", "new", ...)

        Raises:
            DuplicateTrackIdError: If two tracks share an id. Overwriting
                would hide one of them from any comparison.
        """
        mapping: Dict[str, TrackNode] = {}
        for track in self.tracks:
            if track.id in mapping:
                raise DuplicateTrackIdError(track.id, side)
            mapping[track.id] = track
        return mapping

    def __repr__(self) -> str:
        return f"project(tracks={len(self.tracks)})"
