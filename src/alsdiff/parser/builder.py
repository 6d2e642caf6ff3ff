"""
Streaming model builder for Ableton Live projects.

The builder consumes markup events one at a time and rebuilds the
project -> track -> branch tree without ever holding the XML document.
Rack nesting is reconstructed with an explicit stack of sibling lists:
entering <Branches> pushes a list, leaving it pops the list and hangs it
on whatever owns it (the last branch one level up, or the open track).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from ..constants import ParserConstants
from ..errors import MalformedProjectError
from ..model import BranchNode, ProjectNode, TrackNode
from .diagnostics import AnomalyKind, ParseDiagnostics
from .events import EventKind, ParseEvent
from .xml_loader import iter_ableton_events

logger = logging.getLogger(__name__)


@dataclass
class ParserConfig:
    """
    Builder options.

    Attributes:
        require_name_block: Only accept EffectiveName/UserName tags inside a
            <Name> block. Devices also carry UserName tags of their own;
            without the gate those would rename the enclosing track or branch.
        max_anomalies: Abort with MalformedProjectError once more anomalies
            than this have been recorded. None never aborts.
    """
    require_name_block: bool = True
    max_anomalies: Optional[int] = ParserConstants.DEFAULT_MAX_ANOMALIES


@dataclass
class ParserState:
    """Mutable state carried from one event to the next."""
    current_track: Optional[TrackNode] = None
    branch_stack: List[List[BranchNode]] = field(default_factory=list)
    in_name_block: bool = False
    # Open track elements that were rejected; their content is ignored
    skipped_track_depth: int = 0


@dataclass
class ParseResult:
    project: ProjectNode
    diagnostics: ParseDiagnostics


class ProjectBuilder:
    """
    Builds a ProjectNode from a stream of ParseEvents.

    One builder parses one document. All state lives on the instance, so
    independent documents can be parsed concurrently with separate builders.

    Usage:
        builder = ProjectBuilder()
        result = builder.build(iter_ableton_events(path))
        result.project.tracks
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.state = ParserState()
        self.project = ProjectNode()
        self.diagnostics = ParseDiagnostics()
        self._track_ids: Set[str] = set()
        self._finished = False
        self.logger = logging.getLogger(f"{__name__}.ProjectBuilder")

    def build(self, events: Iterable[ParseEvent]) -> ParseResult:
        """
        Consume events until END (or until the source runs dry).

        Raises:
            MalformedProjectError: If the anomaly limit is exceeded
        """
        for event in events:
            self.feed(event)
            if self._finished:
                break
        if not self._finished:
            self.finish()
        return ParseResult(self.project, self.diagnostics)

    def feed(self, event: ParseEvent) -> None:
        """Process a single event."""
        if self._finished:
            raise RuntimeError("ProjectBuilder already finished; create a new builder per document")

        self.diagnostics.events_processed += 1

        if event.kind is EventKind.END:
            self.finish()
            return

        # Inside a rejected track only nested track tags matter (for depth)
        if self.state.skipped_track_depth and event.name not in ParserConstants.TRACK_TAGS:
            return

        if event.kind is EventKind.OPEN:
            self._handle_open(event)
        elif event.kind is EventKind.EMPTY:
            self._handle_empty(event)
        elif event.kind is EventKind.CLOSE:
            self._handle_close(event)

    def finish(self) -> ParseResult:
        """Close the document, recording anything left open."""
        state = self.state
        if state.current_track is not None:
            self._anomaly(AnomalyKind.UNCLOSED_TRACK, state.current_track.track_type,
                          f"track {state.current_track.id} never closed")
        if state.branch_stack:
            self._anomaly(AnomalyKind.UNCLOSED_BRANCHES, ParserConstants.BRANCH_GROUP_TAG,
                          f"{len(state.branch_stack)} branch groups never closed")
        self._finished = True

        self.logger.info(
            f"Parsed {len(self.project.tracks)} tracks "
            f"({self.diagnostics.events_processed} events, {self.diagnostics.count} anomalies)"
        )
        return ParseResult(self.project, self.diagnostics)

    # Event handlers

    def _handle_open(self, event: ParseEvent) -> None:
        name = event.name
        if name in ParserConstants.TRACK_TAGS:
            self._open_track(event)
        elif name == ParserConstants.BRANCH_GROUP_TAG:
            self.state.branch_stack.append([])
        elif name in ParserConstants.BRANCH_TAGS:
            self._open_branch(name)
        elif name == ParserConstants.NAME_BLOCK_TAG:
            self.state.in_name_block = True

    def _handle_empty(self, event: ParseEvent) -> None:
        name = event.name
        if name in ParserConstants.NAME_TAGS:
            self._apply_name(event)
        elif name in ParserConstants.TRACK_TAGS:
            self._open_track(event)
            self._close_track(name)
        elif name in ParserConstants.BRANCH_TAGS:
            self._open_branch(name)
        elif name == ParserConstants.BRANCH_GROUP_TAG:
            # ElementTree cannot tell <Branches/> from <Branches></Branches>
            self.state.branch_stack.append([])
            self._close_branch_group()
        # A self-closing <Name/> has no content

    def _handle_close(self, event: ParseEvent) -> None:
        name = event.name
        if name in ParserConstants.TRACK_TAGS:
            self._close_track(name)
        elif name == ParserConstants.BRANCH_GROUP_TAG:
            self._close_branch_group()
        elif name == ParserConstants.NAME_BLOCK_TAG:
            self.state.in_name_block = False

    # Tracks

    def _open_track(self, event: ParseEvent) -> None:
        state = self.state
        if state.current_track is not None or state.skipped_track_depth:
            state.skipped_track_depth += 1
            self._anomaly(AnomalyKind.NESTED_TRACK, event.name,
                          f"inside track {state.current_track.id}" if state.current_track else "inside skipped track")
            return

        track_id = event.attributes.get(ParserConstants.ID_ATTRIBUTE)
        if track_id is None:
            state.skipped_track_depth += 1
            self._anomaly(AnomalyKind.MISSING_ID, event.name)
            return

        state.current_track = TrackNode(track_type=event.name, id=track_id)
        self.logger.debug(f"Opened {event.name} {track_id}")

    def _close_track(self, name: str) -> None:
        state = self.state
        if state.skipped_track_depth:
            state.skipped_track_depth -= 1
            return

        track = state.current_track
        if track is None:
            self._anomaly(AnomalyKind.UNMATCHED_CLOSE, name, "no open track")
            return
        state.current_track = None

        if name != track.track_type:
            self._anomaly(AnomalyKind.UNMATCHED_CLOSE, name, f"closes {track.track_type} {track.id}")

        if track.id in self._track_ids:
            self._anomaly(AnomalyKind.DUPLICATE_TRACK_ID, name, f"id {track.id}")
            return

        self._track_ids.add(track.id)
        self.project.tracks.append(track)
        self.logger.debug(f"Closed {name} {track.id} ({track.effective_name!r})")

    # Branches

    def _open_branch(self, name: str) -> None:
        if not self.state.branch_stack:
            self._anomaly(AnomalyKind.ORPHAN_BRANCH, name, "outside any <Branches> group")
            return
        self.state.branch_stack[-1].append(BranchNode(branch_type=name))

    def _close_branch_group(self) -> None:
        state = self.state
        if not state.branch_stack:
            self._anomaly(AnomalyKind.UNMATCHED_CLOSE, ParserConstants.BRANCH_GROUP_TAG, "no open group")
            return

        group = state.branch_stack.pop()
        if state.branch_stack:
            parent_bucket = state.branch_stack[-1]
            if parent_bucket:
                parent_bucket[-1].branches = group
            else:
                self._anomaly(AnomalyKind.DETACHED_BRANCHES, ParserConstants.BRANCH_GROUP_TAG,
                              f"{len(group)} branches with no parent branch")
        elif state.current_track is not None:
            state.current_track.branches = group
        else:
            self._anomaly(AnomalyKind.DETACHED_BRANCHES, ParserConstants.BRANCH_GROUP_TAG,
                          f"{len(group)} branches outside any track")

    # Names

    def _name_target(self) -> Optional[Union[TrackNode, BranchNode]]:
        """The node a name tag belongs to: the newest branch, else the track."""
        stack = self.state.branch_stack
        if stack and stack[-1]:
            return stack[-1][-1]
        return self.state.current_track

    def _apply_name(self, event: ParseEvent) -> None:
        if self.config.require_name_block and not self.state.in_name_block:
            return

        target = self._name_target()
        if target is None:
            return

        value = event.attributes.get(ParserConstants.VALUE_ATTRIBUTE)
        if value is None:
            self._anomaly(AnomalyKind.MISSING_VALUE, event.name)
            return

        if event.name == ParserConstants.EFFECTIVE_NAME_TAG:
            target.effective_name = value
        elif value:
            # Live writes UserName Value="" for names the user never set
            target.user_name = value

    def _anomaly(self, kind: AnomalyKind, element: str, detail: str = "") -> None:
        self.diagnostics.record(kind, element, detail)
        limit = self.config.max_anomalies
        if limit is not None and self.diagnostics.count > limit:
            raise MalformedProjectError(
                f"Document has more than {limit} structural anomalies; giving up",
                self.diagnostics,
            )


def build_project(events: Iterable[ParseEvent], config: Optional[ParserConfig] = None) -> ParseResult:
    """Convenience function to build a project from an event stream."""
    return ProjectBuilder(config).build(events)


def load_project(path: Path, config: Optional[ParserConfig] = None) -> ParseResult:
    """
    Parse an Ableton .als or .xml file into a project model.

    Args:
        path: Path to the project file
        config: Builder options (defaults to ParserConfig())

    Returns:
        ParseResult with the project and the parse diagnostics

    Raises:
        FileNotFoundError, ValueError: File missing or unsupported suffix
        MalformedProjectError: Too many structural anomalies
    """
    logger.info(f"Loading project: {path}")
    return build_project(iter_ableton_events(Path(path)), config)
