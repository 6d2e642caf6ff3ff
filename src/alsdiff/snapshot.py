"""
JSON snapshots of parsed projects.

A snapshot stores the model of one project version so that the next save
can be diffed against it without keeping the old .als file around.

Layout:
    {"Tracks": [{"Type": "MidiTrack", "Id": "12", "EffectiveName": "Bass",
                 "UserName": "Sub", "Branches": [...]}, ...]}
"UserName" and "Branches" are omitted when not set.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import SnapshotKeys
from .diff import diff_projects, summarize
from .errors import SnapshotError
from .model import BranchNode, ProjectNode, TrackNode, serialize_project
from .parser import ParserConfig, load_project

logger = logging.getLogger(__name__)


def project_from_dict(data: Dict[str, Any]) -> ProjectNode:
    """
    Rebuild a project from its snapshot dictionary.

    Raises:
        SnapshotError: If required keys are missing or have the wrong type
    """
    try:
        tracks = [_track_from_dict(item) for item in data[SnapshotKeys.TRACKS]]
    except (KeyError, TypeError, AttributeError) as e:
        raise SnapshotError(f"Invalid project snapshot: {e!r}") from e
    return ProjectNode(tracks=tracks)


def _track_from_dict(data: Dict[str, Any]) -> TrackNode:
    return TrackNode(
        track_type=data[SnapshotKeys.TYPE],
        id=str(data[SnapshotKeys.ID]),
        effective_name=data[SnapshotKeys.EFFECTIVE_NAME],
        user_name=data.get(SnapshotKeys.USER_NAME),
        branches=_branches_from_list(data.get(SnapshotKeys.BRANCHES)),
    )


def _branches_from_list(items: Optional[List[Dict[str, Any]]]) -> Optional[List[BranchNode]]:
    if items is None:
        return None
    return [
        BranchNode(
            branch_type=item[SnapshotKeys.TYPE],
            effective_name=item[SnapshotKeys.EFFECTIVE_NAME],
            user_name=item.get(SnapshotKeys.USER_NAME),
            branches=_branches_from_list(item.get(SnapshotKeys.BRANCHES)),
        )
        for item in items
    ]


def save_snapshot(project: ProjectNode, path: Path) -> None:
    """Write a project snapshot as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_project(project), f, indent=2)
    logger.info(f"Saved snapshot of {len(project.tracks)} tracks to {path}")


def load_snapshot(path: Path) -> ProjectNode:
    """
    Load a project from a JSON snapshot.

    Raises:
        SnapshotError: If the file is missing, not JSON, or not a snapshot
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"Old snapshot not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Failed to read snapshot {path}: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotError(f"Invalid project snapshot in {path}: expected an object")
    return project_from_dict(data)


def load_any(path: Path, config: Optional[ParserConfig] = None) -> ProjectNode:
    """Load a project from a .json snapshot or parse it from an .als/.xml file."""
    path = Path(path)
    if path.suffix == ".json":
        return load_snapshot(path)
    return load_project(path, config).project


def compare_with_snapshot(
    current_path: Path,
    snapshot_path: Path,
    config: Optional[ParserConfig] = None,
) -> Dict[str, Any]:
    """
    Parse the current project and diff it against a stored snapshot.

    Returns:
        {"summary": newline-joined change descriptions,
         "project": snapshot dictionary of the current project}
    """
    current = load_project(Path(current_path), config).project
    old = load_snapshot(snapshot_path)
    changes = diff_projects(old, current)
    return {
        "summary": summarize(changes),
        "project": serialize_project(current),
    }
