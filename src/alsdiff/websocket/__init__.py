"""WebSocket module for streaming project models and diffs to clients."""

from .server import ProjectWebSocketServer
from .broadcaster import MessageBroadcaster
from .serializers import (
    create_message,
    create_project_message,
    create_diff_message,
    create_error_message,
    create_ack_message,
)

__all__ = [
    'ProjectWebSocketServer',
    'MessageBroadcaster',
    'create_message',
    'create_project_message',
    'create_diff_message',
    'create_error_message',
    'create_ack_message',
]
