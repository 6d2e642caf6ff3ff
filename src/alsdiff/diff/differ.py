"""
Semantic diff between two versions of a project.

Tracks are matched by id. Rack branches have no id, so branch lists are
compared as whole values: the differ can say that a track's rack changed,
but not which branch inside it changed.
"""

import logging
from typing import List, Optional

from ..model import BranchNode, ProjectNode, TrackNode
from .changes import Change, ChangeKind

logger = logging.getLogger(__name__)


class ProjectDiffer:
    """
    Computes the list of changes between an old and a new project.

    Order of the result: removed tracks in old document order, then added
    and changed tracks in new document order.
    """

    def diff(self, old: ProjectNode, new: ProjectNode) -> List[Change]:
        """
        Compute the changes that turn `old` into `new`.

        Raises:
            DuplicateTrackIdError: If either side holds two tracks with one id
        """
        old_map = old.track_map(side="old")
        new_map = new.track_map(side="new")
        changes: List[Change] = []

        for track in old.tracks:
            if track.id not in new_map:
                changes.append(Change(ChangeKind.TRACK_REMOVED, track.id, track.effective_name))

        for track in new.tracks:
            old_track = old_map.get(track.id)
            if old_track is None:
                changes.append(Change(ChangeKind.TRACK_ADDED, track.id, track.effective_name))
            elif track != old_track:
                self._diff_track(old_track, track, changes)

        logger.debug(f"Diffed {len(old.tracks)} -> {len(new.tracks)} tracks: {len(changes)} changes")
        return changes

    def _diff_track(self, old: TrackNode, new: TrackNode, changes: List[Change]) -> None:
        # A user rename also changes the effective name; report it once
        if new.user_name != old.user_name:
            changes.append(Change(
                ChangeKind.TRACK_RENAMED, new.id, new.effective_name,
                old_value=old.user_name, new_value=new.user_name,
            ))
        elif new.effective_name != old.effective_name:
            # Not renamed by the user, so the device that names the track changed
            changes.append(Change(
                ChangeKind.INSTRUMENT_SWAPPED, new.id, new.effective_name,
                old_value=old.effective_name, new_value=new.effective_name,
            ))

        change = self._diff_branch_lists(new, old.branches, new.branches)
        if change is not None:
            changes.append(change)

    @staticmethod
    def _diff_branch_lists(
        track: TrackNode,
        old: Optional[List[BranchNode]],
        new: Optional[List[BranchNode]],
    ) -> Optional[Change]:
        if old is not None and new is not None:
            if old != new:
                return Change(ChangeKind.DEVICES_MODIFIED, track.id, track.effective_name)
        elif new is not None:
            return Change(ChangeKind.DEVICE_CHAIN_ADDED, track.id, track.effective_name)
        elif old is not None:
            return Change(ChangeKind.DEVICE_CHAIN_REMOVED, track.id, track.effective_name)
        return None


def diff_projects(old: ProjectNode, new: ProjectNode) -> List[Change]:
    """Convenience function returning the changes from `old` to `new`."""
    return ProjectDiffer().diff(old, new)
