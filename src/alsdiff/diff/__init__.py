"""
Diff module: semantic comparison of two project versions.
"""

from .changes import Change, ChangeKind, summarize
from .differ import ProjectDiffer, diff_projects

__all__ = [
    "Change",
    "ChangeKind",
    "summarize",
    "ProjectDiffer",
    "diff_projects",
]
