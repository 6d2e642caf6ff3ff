"""
Server module for watching Ableton Live projects.

This module provides:
- A project service that reloads a set and diffs it against the last load
- A file watcher that triggers reloads when Live saves the set
"""

from .project_service import ProjectService
from .watcher import AbletonFileHandler, FileWatcher

__all__ = ["ProjectService", "AbletonFileHandler", "FileWatcher"]
