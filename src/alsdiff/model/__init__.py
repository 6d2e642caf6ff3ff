"""
Model module for Ableton Live projects.

This module provides:
- Node class definitions for projects, tracks and rack branches
- Visitor patterns for traversal, serialization and pretty printing
- Content hashing for change detection
"""

from .node import (
    NodeType,
    ProjectNode,
    TrackNode,
    BranchNode,
)

from .visitor import (
    ModelVisitor,
    SerializationVisitor,
    PrettyPrintVisitor,
    serialize_project,
)

from .hashing import (
    NodeHasher,
    hash_tree,
)

__all__ = [
    # Nodes
    "NodeType",
    "ProjectNode",
    "TrackNode",
    "BranchNode",
    # Visitors
    "ModelVisitor",
    "SerializationVisitor",
    "PrettyPrintVisitor",
    "serialize_project",
    # Hashing
    "NodeHasher",
    "hash_tree",
]
