"""
Constants for parsing Ableton Live project files and serving diffs.

This module centralizes tag names, attribute names and server defaults
used throughout the parser, differ and watch server.
"""

from enum import Enum


class TrackType(str, Enum):
    """Track kinds, named exactly as the XML tags that open them."""
    AUDIO = "AudioTrack"
    MIDI = "MidiTrack"
    RETURN = "ReturnTrack"


class BranchType(str, Enum):
    """Rack branch kinds, named exactly as their XML tags."""
    DRUM = "DrumBranch"
    INSTRUMENT = "InstrumentBranch"
    AUDIO_EFFECT = "AudioEffectBranch"
    MIDI_EFFECT = "MidiEffectBranch"


class ParserConstants:
    """Tag and attribute names the model builder reacts to."""

    TRACK_TAGS = frozenset(t.value for t in TrackType)
    BRANCH_TAGS = frozenset(b.value for b in BranchType)

    BRANCH_GROUP_TAG = "Branches"
    NAME_BLOCK_TAG = "Name"
    EFFECTIVE_NAME_TAG = "EffectiveName"
    USER_NAME_TAG = "UserName"
    NAME_TAGS = frozenset((EFFECTIVE_NAME_TAG, USER_NAME_TAG))

    ID_ATTRIBUTE = "Id"
    VALUE_ATTRIBUTE = "Value"

    # Escalate to MalformedProjectError past this many anomalies
    DEFAULT_MAX_ANOMALIES = 100


class SnapshotKeys:
    """Keys of the JSON snapshot format."""
    TRACKS = "Tracks"
    TYPE = "Type"
    ID = "Id"
    EFFECTIVE_NAME = "EffectiveName"
    USER_NAME = "UserName"
    BRANCHES = "Branches"


class ServerConstants:
    """Defaults for the watch server and its WebSocket endpoint."""

    DEFAULT_HOST = "localhost"
    DEFAULT_PORT = 8765

    # Live writes the .als in several steps; coalesce them
    DEBOUNCE_SECONDS = 1.0

    CLIENT_QUEUE_SIZE = 1000

    WATCHED_SUFFIXES = frozenset((".als", ".xml"))


class MessageType:
    """WebSocket message types."""
    PROJECT = "PROJECT"
    DIFF = "DIFF"
    ERROR = "ERROR"
    ACK = "ACK"
