"""
Parser module for Ableton Live project files.

This module handles:
- Opening and decompressing .als files
- Turning the XML into a flat stream of markup events
- Rebuilding the track and rack-branch tree from that stream
- Recording structural anomalies found along the way
"""

from .xml_loader import (
    open_ableton_stream,
    iter_ableton_events,
    iter_events,
    iter_events_from_string,
)
from .events import EventKind, ParseEvent
from .diagnostics import Anomaly, AnomalyKind, ParseDiagnostics
from .builder import (
    ParserConfig,
    ParserState,
    ParseResult,
    ProjectBuilder,
    build_project,
    load_project,
)

__all__ = [
    "open_ableton_stream",
    "iter_ableton_events",
    "iter_events",
    "iter_events_from_string",
    "EventKind",
    "ParseEvent",
    "Anomaly",
    "AnomalyKind",
    "ParseDiagnostics",
    "ParserConfig",
    "ParserState",
    "ParseResult",
    "ProjectBuilder",
    "build_project",
    "load_project",
]
