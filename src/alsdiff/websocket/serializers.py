"""Builders for the JSON messages sent to WebSocket clients."""

from typing import Any, Dict, List, Optional

from ..constants import MessageType
from ..diff import Change, summarize
from ..model import ProjectNode, hash_tree, serialize_project


def create_message(msg_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a WebSocket message with a type and payload.

    Args:
        msg_type: Message type (PROJECT, DIFF, ERROR, ACK)
        payload: Message payload

    Returns:
        Message dictionary
    """
    return {
        'type': msg_type,
        'payload': payload,
    }


def create_project_message(project: ProjectNode, project_path: Optional[str] = None) -> Dict[str, Any]:
    """Create a PROJECT message carrying the full model."""
    payload = {
        'project': serialize_project(project),
        'root_hash': hash_tree(project),
    }
    if project_path:
        payload['project_path'] = project_path
    return create_message(MessageType.PROJECT, payload)


def create_diff_message(
    changes: List[Change],
    root_hash: str,
    project_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a DIFF message.

    Args:
        changes: Changes from the previous version to the current one
        root_hash: Content hash of the current project
        project_path: Optional path to the project file
    """
    payload = {
        'summary': summarize(changes),
        'changes': [change.to_dict() for change in changes],
        'root_hash': root_hash,
    }
    if project_path:
        payload['project_path'] = project_path
    return create_message(MessageType.DIFF, payload)


def create_error_message(error: str, details: Optional[str] = None) -> Dict[str, Any]:
    payload = {'error': error}
    if details:
        payload['details'] = details
    return create_message(MessageType.ERROR, payload)


def create_ack_message(request_id: Optional[str] = None) -> Dict[str, Any]:
    payload = {'status': 'ok'}
    if request_id:
        payload['request_id'] = request_id
    return create_message(MessageType.ACK, payload)
