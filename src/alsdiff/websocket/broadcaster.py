"""Fan-out of JSON messages to connected WebSocket clients."""

import asyncio
import json
import logging
from typing import Any, Dict

from ..constants import ServerConstants

logger = logging.getLogger(__name__)


class MessageBroadcaster:
    """
    Sends messages to every connected client.

    Each client gets a bounded queue drained by its own sender task, so
    one slow client never delays the others and messages to a client keep
    their order. When a client's queue is full its new messages are dropped.
    """

    def __init__(self, queue_size: int = ServerConstants.CLIENT_QUEUE_SIZE):
        self.queue_size = queue_size
        # websocket -> {'queue': asyncio.Queue, 'task': asyncio.Task}
        self.clients: Dict[Any, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket) -> None:
        async with self._lock:
            if websocket in self.clients:
                return
            queue = asyncio.Queue(maxsize=self.queue_size)
            task = asyncio.create_task(self._sender_loop(websocket, queue))
            self.clients[websocket] = {'queue': queue, 'task': task}
            logger.info(f"Client connected. Total clients: {len(self.clients)}")

    async def unregister(self, websocket) -> None:
        async with self._lock:
            client = self.clients.pop(websocket, None)
        if client is None:
            return

        task = client['task']
        if task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info(f"Client disconnected. Total clients: {len(self.clients)}")

    async def broadcast(self, message: Dict[str, Any]) -> None:
        """Queue a message for every client without waiting for delivery."""
        async with self._lock:
            queues = [client['queue'] for client in self.clients.values()]
        if not queues:
            return

        message_json = self._encode(message)
        if message_json is None:
            return

        for queue in queues:
            self._enqueue(queue, message_json)

    async def send_to_client(self, websocket, message: Dict[str, Any]) -> None:
        """Queue a message for a single client."""
        message_json = self._encode(message)
        if message_json is None:
            return

        async with self._lock:
            client = self.clients.get(websocket)
        if client is not None:
            self._enqueue(client['queue'], message_json)

    def get_client_count(self) -> int:
        return len(self.clients)

    async def close_all(self) -> None:
        async with self._lock:
            websockets = list(self.clients)
        for websocket in websockets:
            await self.unregister(websocket)
            await websocket.close()
        logger.info("All clients disconnected")

    async def _sender_loop(self, websocket, queue: asyncio.Queue) -> None:
        while True:
            message_json = await queue.get()
            try:
                await websocket.send(message_json)
            except Exception as e:
                logger.warning(f"Failed to send to client: {e}")
                await self.unregister(websocket)
                return
            finally:
                queue.task_done()

    @staticmethod
    def _encode(message: Dict[str, Any]):
        try:
            return json.dumps(message)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize message: {e}")
            return None

    @staticmethod
    def _enqueue(queue: asyncio.Queue, message_json: str) -> None:
        try:
            queue.put_nowait(message_json)
        except asyncio.QueueFull:
            logger.warning("Client queue full, dropping message")
