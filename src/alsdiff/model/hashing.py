"""
Content hashing for model nodes.

Hashes let the watch server tell an unchanged save apart from a real edit
without running the differ, and tag DIFF messages with a short fingerprint.
"""

import hashlib
import json
from typing import Union

from .node import BranchNode, ProjectNode, TrackNode

Node = Union[ProjectNode, TrackNode, BranchNode]


class NodeHasher:
    """
    Computes content hashes for model nodes.

    The hash of a node is computed from:
    - Node type
    - The node's own fields (id, type, names)
    - Hashes of its children, in order
    """

    def __init__(self, algorithm: str = "sha256"):
        self.algorithm = algorithm

    def hash_node(self, node: Node) -> str:
        """
        Compute the hash of a node and, recursively, its children.

        Returns:
            Hexadecimal hash string
        """
        hasher = hashlib.new(self.algorithm)
        hasher.update(node.node_type.value.encode("utf-8"))
        hasher.update(self._serialize_fields(node).encode("utf-8"))

        # None and [] are different states for a branch list
        if isinstance(node, (TrackNode, BranchNode)):
            hasher.update(b"branches:" + (b"none" if node.branches is None else b"list"))

        for child in node.children:
            hasher.update(self.hash_node(child).encode("utf-8"))

        return hasher.hexdigest()

    def _serialize_fields(self, node: Node) -> str:
        if isinstance(node, TrackNode):
            fields = {
                "type": node.track_type,
                "id": node.id,
                "effective_name": node.effective_name,
                "user_name": node.user_name,
            }
        elif isinstance(node, BranchNode):
            fields = {
                "type": node.branch_type,
                "effective_name": node.effective_name,
                "user_name": node.user_name,
            }
        else:
            fields = {}
        return json.dumps(fields, sort_keys=True)


def hash_tree(root: Node, algorithm: str = "sha256") -> str:
    """Convenience function returning the hash of an entire tree."""
    return NodeHasher(algorithm=algorithm).hash_node(root)
