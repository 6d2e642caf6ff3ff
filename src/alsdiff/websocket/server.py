"""WebSocket server streaming project models and diffs to clients."""

import json
import logging
from typing import Any, List, Optional

from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed

from ..constants import ServerConstants
from ..diff import Change
from ..model import ProjectNode
from .broadcaster import MessageBroadcaster
from .serializers import (
    create_ack_message,
    create_diff_message,
    create_error_message,
    create_project_message,
)

logger = logging.getLogger(__name__)


class ProjectWebSocketServer:
    """
    WebSocket server for a watched project.

    New clients receive the current model right away; afterwards every
    reload is pushed as a DIFF message.
    """

    def __init__(self, host: str = ServerConstants.DEFAULT_HOST, port: int = ServerConstants.DEFAULT_PORT):
        self.host = host
        self.port = port
        self.broadcaster = MessageBroadcaster()
        self.server: Optional[Any] = None
        self._current_project: Optional[ProjectNode] = None
        self._project_path: Optional[str] = None
        self._running = False

    async def start(self) -> None:
        if self._running:
            logger.warning("Server is already running")
            return

        self.server = await serve(self._handle_client, self.host, self.port)
        self._running = True
        logger.info(f"WebSocket server started on ws://{self.host}:{self.port}")

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        await self.broadcaster.close_all()
        if self.server:
            self.server.close()
            await self.server.wait_closed()
        logger.info("WebSocket server stopped")

    async def _handle_client(self, websocket) -> None:
        await self.broadcaster.register(websocket)
        try:
            if self._current_project is not None:
                message = create_project_message(self._current_project, self._project_path)
            else:
                message = create_error_message(
                    "No project loaded",
                    "The server has not parsed a project yet.",
                )
            await self.broadcaster.send_to_client(websocket, message)

            # Clients only talk to acknowledge; anything else is logged
            async for message_str in websocket:
                try:
                    request = json.loads(message_str)
                except json.JSONDecodeError as e:
                    logger.error(f"Invalid JSON from client: {e}")
                    await self.broadcaster.send_to_client(websocket, create_error_message("Invalid JSON", str(e)))
                    continue
                logger.debug(f"Received message from client: {request.get('type')}")
                await self.broadcaster.send_to_client(websocket, create_ack_message(request.get('request_id')))
        except ConnectionClosed:
            logger.info("Client connection closed")
        finally:
            await self.broadcaster.unregister(websocket)

    async def broadcast_project(self, project: ProjectNode, project_path: Optional[str] = None) -> None:
        self._current_project = project
        if project_path:
            self._project_path = project_path
        await self.broadcaster.broadcast(create_project_message(project, self._project_path))
        logger.info("Broadcasted project to all clients")

    async def broadcast_diff(self, project: ProjectNode, changes: List[Change], root_hash: str) -> None:
        self._current_project = project
        await self.broadcaster.broadcast(create_diff_message(changes, root_hash, self._project_path))
        logger.info(f"Broadcasted {len(changes)} changes to all clients")

    async def broadcast_error(self, error: str, details: Optional[str] = None) -> None:
        await self.broadcaster.broadcast(create_error_message(error, details))
        logger.warning(f"Broadcasted error: {error}")

    def get_client_count(self) -> int:
        return self.broadcaster.get_client_count()

    def is_running(self) -> bool:
        return self._running
