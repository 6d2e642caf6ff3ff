"""
alsdiff: parse Ableton Live sets into a track/rack model and report what
changed between two versions.
"""

from .errors import AlsDiffError, DuplicateTrackIdError, MalformedProjectError, SnapshotError
from .model import BranchNode, ProjectNode, TrackNode
from .parser import ParserConfig, build_project, load_project
from .diff import Change, ChangeKind, diff_projects
from .snapshot import compare_with_snapshot, load_snapshot, save_snapshot

__version__ = "0.1.0"

__all__ = [
    "AlsDiffError",
    "DuplicateTrackIdError",
    "MalformedProjectError",
    "SnapshotError",
    "BranchNode",
    "ProjectNode",
    "TrackNode",
    "ParserConfig",
    "build_project",
    "load_project",
    "Change",
    "ChangeKind",
    "diff_projects",
    "compare_with_snapshot",
    "load_snapshot",
    "save_snapshot",
]
