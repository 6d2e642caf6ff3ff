"""
Project service for the watch server.

This service keeps the most recent model of a watched project, re-parses
the file on demand, diffs the new model against the previous one and
pushes the result to WebSocket clients.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..diff import Change, diff_projects, summarize
from ..model import ProjectNode, hash_tree
from ..parser import ParserConfig, load_project
from ..snapshot import save_snapshot

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Loads a project repeatedly and reports what changed between loads.

    Usage:
        service = ProjectService()
        service.load_project(path)          # first load, no changes
        result = service.load_project(path) # after a save in Live
        print(result["summary"])
    """

    def __init__(
        self,
        websocket_server: Optional[Any] = None,
        config: Optional[ParserConfig] = None,
        snapshot_path: Optional[Path] = None,
    ):
        """
        Args:
            websocket_server: Optional ProjectWebSocketServer to broadcast to
            config: Builder options used for every load
            snapshot_path: If set, the latest model is saved there after each load
        """
        self.websocket_server = websocket_server
        self.config = config or ParserConfig()
        self.snapshot_path = snapshot_path
        self.current_project: Optional[ProjectNode] = None
        self.current_hash: Optional[str] = None
        self.current_file: Optional[Path] = None
        self.logger = logging.getLogger(f"{__name__}.ProjectService")

    def load_project(self, file_path: Path) -> Dict[str, Any]:
        """
        Parse the project and diff it against the previously loaded model.

        Returns:
            Dictionary with status, root hash, changes and summary. On the
            first load, or when the content hash is unchanged, changes is empty.
        """
        file_path = Path(file_path)
        result = load_project(file_path, self.config)
        project = result.project
        root_hash = hash_tree(project)

        changes: List[Change] = []
        if self.current_project is not None and root_hash != self.current_hash:
            changes = diff_projects(self.current_project, project)
        elif self.current_project is not None:
            self.logger.info("No changes detected (hash identical)")

        first_load = self.current_project is None
        self.current_project = project
        self.current_hash = root_hash
        self.current_file = file_path

        if self.snapshot_path:
            save_snapshot(project, self.snapshot_path)

        return {
            "status": "success",
            "file": str(file_path),
            "root_hash": root_hash,
            "first_load": first_load,
            "changes": changes,
            "summary": summarize(changes),
            "anomalies": result.diagnostics.count,
        }

    async def reload_and_broadcast(self, file_path: Path) -> Optional[Dict[str, Any]]:
        """
        Reload the project and push the outcome to WebSocket clients.

        Errors are logged and broadcast instead of raised: a half-written
        file must not stop the watch loop.
        """
        try:
            result = self.load_project(file_path)
        except Exception as e:
            self.logger.error(f"Error reloading project: {e}")
            if self._can_broadcast():
                await self.websocket_server.broadcast_error("Reload failed", str(e))
            return None

        if result["summary"]:
            self.logger.info(f"Changes in {Path(file_path).name}:\n{result['summary']}")

        if self._can_broadcast():
            if result["first_load"]:
                await self.websocket_server.broadcast_project(self.current_project, str(file_path))
            elif result["changes"]:
                await self.websocket_server.broadcast_diff(
                    self.current_project, result["changes"], result["root_hash"]
                )
        return result

    def _can_broadcast(self) -> bool:
        return self.websocket_server is not None and self.websocket_server.is_running()
