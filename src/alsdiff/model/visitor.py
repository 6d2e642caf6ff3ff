"""
Visitor pattern implementation for model traversal and serialization.

This module provides:
- Generic visitor pattern for walking a project tree
- Serialization to the JSON snapshot layout
- Pretty printing for the terminal
"""

import json
from typing import Any, Dict, List, Union

from ..constants import SnapshotKeys
from .node import BranchNode, ProjectNode, TrackNode

Node = Union[ProjectNode, TrackNode, BranchNode]


class ModelVisitor:
    """
    Base visitor class for walking model nodes.

    Subclass this and override visit_* methods to implement custom behavior.
    """

    def visit(self, node: Node) -> Any:
        """
        Visit a node and dispatch to the appropriate visit_* method.

        This implements double dispatch by calling visit_{node_type.value}.
        """
        method_name = f"visit_{node.node_type.value}"
        visitor_method = getattr(self, method_name, self.generic_visit)
        return visitor_method(node)

    def generic_visit(self, node: Node) -> Any:
        """Default visit method that traverses children."""
        return [self.visit(child) for child in node.children]

    def traverse(self, node: Node) -> List[Node]:
        """
        Collect every node of the tree in pre-order.

        Uses an explicit stack so rack depth never hits the recursion limit.
        """
        nodes = []
        pending = [node]
        while pending:
            current = pending.pop()
            nodes.append(current)
            pending.extend(reversed(current.children))
        return nodes


class SerializationVisitor(ModelVisitor):
    """
    Visitor that turns a project into the JSON snapshot layout.

    Optional fields (UserName, Branches) are left out when they are None so
    that "not set" and "set to an empty list" stay distinguishable.
    """

    def visit_project(self, node: ProjectNode) -> Dict[str, Any]:
        return {SnapshotKeys.TRACKS: [self.visit(track) for track in node.tracks]}

    def visit_track(self, node: TrackNode) -> Dict[str, Any]:
        result = {
            SnapshotKeys.TYPE: node.track_type,
            SnapshotKeys.ID: node.id,
            SnapshotKeys.EFFECTIVE_NAME: node.effective_name,
        }
        self._add_optional(result, node)
        return result

    def visit_branch(self, node: BranchNode) -> Dict[str, Any]:
        result = {
            SnapshotKeys.TYPE: node.branch_type,
            SnapshotKeys.EFFECTIVE_NAME: node.effective_name,
        }
        self._add_optional(result, node)
        return result

    def _add_optional(self, result: Dict[str, Any], node: Union[TrackNode, BranchNode]) -> None:
        if node.user_name is not None:
            result[SnapshotKeys.USER_NAME] = node.user_name
        if node.branches is not None:
            result[SnapshotKeys.BRANCHES] = [self.visit(branch) for branch in node.branches]

    def to_json(self, node: Node, indent: int = 2) -> str:
        """Serialize a node to a JSON string."""
        return json.dumps(self.visit(node), indent=indent)


class PrettyPrintVisitor(ModelVisitor):
    """Visitor that creates a human-readable tree of the project."""

    def __init__(self, indent: int = 2):
        self.indent = indent
        self.current_depth = 0

    def visit_project(self, node: ProjectNode) -> str:
        lines = [f"project ({len(node.tracks)} tracks)"]
        lines.extend(self._visit_children(node))
        return "\n".join(lines)

    def visit_track(self, node: TrackNode) -> str:
        line = f"{self._indent()}{node.track_type} [{node.id}] {self._names(node)}"
        return "\n".join([line] + self._visit_children(node))

    def visit_branch(self, node: BranchNode) -> str:
        line = f"{self._indent()}{node.branch_type} {self._names(node)}"
        return "\n".join([line] + self._visit_children(node))

    def _visit_children(self, node: Node) -> List[str]:
        self.current_depth += 1
        lines = [self.visit(child) for child in node.children]
        self.current_depth -= 1
        return lines

    def _indent(self) -> str:
        return " " * (self.current_depth * self.indent)

    @staticmethod
    def _names(node: Union[TrackNode, BranchNode]) -> str:
        if node.user_name is not None:
            return f"'{node.user_name}' (effective: '{node.effective_name}')"
        return f"'{node.effective_name}'"

    def print(self, node: Node) -> str:
        """Generate the pretty-printed tree of a node."""
        self.current_depth = 0
        return self.visit(node)


def serialize_project(project: ProjectNode) -> Dict[str, Any]:
    """Convenience function to serialize a project to a snapshot dict."""
    return SerializationVisitor().visit(project)
