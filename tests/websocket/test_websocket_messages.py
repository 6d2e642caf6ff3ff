import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from alsdiff.diff import Change, ChangeKind
from alsdiff.model import ProjectNode, TrackNode, hash_tree
from alsdiff.websocket import (
    MessageBroadcaster,
    ProjectWebSocketServer,
    create_ack_message,
    create_diff_message,
    create_error_message,
    create_project_message,
)


@pytest.fixture
def project():
    return ProjectNode(tracks=[TrackNode(track_type="AudioTrack", id="1", effective_name="Vox")])


def test_project_message(project):
    message = create_project_message(project, "/sets/Song.als")

    assert message["type"] == "PROJECT"
    assert message["payload"]["project"] == {
        "Tracks": [{"Type": "AudioTrack", "Id": "1", "EffectiveName": "Vox"}]
    }
    assert message["payload"]["root_hash"] == hash_tree(project)
    assert message["payload"]["project_path"] == "/sets/Song.als"


def test_diff_message_is_json_serializable():
    changes = [
        Change(ChangeKind.TRACK_ADDED, "2", "Bass"),
        Change(ChangeKind.TRACK_RENAMED, "1", "Vox", old_value=None, new_value="Lead"),
    ]

    message = create_diff_message(changes, "abc123")
    payload = json.loads(json.dumps(message))["payload"]

    assert message["type"] == "DIFF"
    assert payload["summary"] == "Added new track: Bass\nTrack Vox: Renamed from 'None' to 'Lead'"
    assert [c["type"] for c in payload["changes"]] == ["track_added", "track_renamed"]
    assert payload["root_hash"] == "abc123"
    assert "project_path" not in payload


def test_error_and_ack_messages():
    assert create_error_message("Reload failed") == {"type": "ERROR", "payload": {"error": "Reload failed"}}
    assert create_error_message("x", "why")["payload"]["details"] == "why"
    assert create_ack_message("r1") == {"type": "ACK", "payload": {"status": "ok", "request_id": "r1"}}


def make_client():
    websocket = MagicMock()
    websocket.send = AsyncMock()
    websocket.close = AsyncMock()
    return websocket


@pytest.mark.asyncio
async def test_broadcast_reaches_every_client():
    broadcaster = MessageBroadcaster()
    clients = [make_client(), make_client()]
    for client in clients:
        await broadcaster.register(client)

    await broadcaster.broadcast({"type": "ACK", "payload": {}})
    await asyncio.sleep(0.01)

    for client in clients:
        client.send.assert_awaited_once_with(json.dumps({"type": "ACK", "payload": {}}))
    await broadcaster.close_all()
    assert broadcaster.get_client_count() == 0


@pytest.mark.asyncio
async def test_register_twice_keeps_one_entry():
    broadcaster = MessageBroadcaster()
    client = make_client()
    await broadcaster.register(client)
    await broadcaster.register(client)
    assert broadcaster.get_client_count() == 1
    await broadcaster.close_all()


@pytest.mark.asyncio
async def test_failed_send_unregisters_client():
    broadcaster = MessageBroadcaster()
    client = make_client()
    client.send.side_effect = ConnectionError("gone")
    await broadcaster.register(client)

    await broadcaster.send_to_client(client, {"type": "ACK", "payload": {}})
    await asyncio.sleep(0.01)

    assert broadcaster.get_client_count() == 0


@pytest.mark.asyncio
async def test_full_queue_drops_messages():
    broadcaster = MessageBroadcaster(queue_size=1)
    client = make_client()
    gate = asyncio.Event()

    async def slow_send(message):
        await gate.wait()

    client.send.side_effect = slow_send
    await broadcaster.register(client)

    for i in range(5):
        await broadcaster.broadcast({"n": i})
    gate.set()
    await asyncio.sleep(0.01)

    assert client.send.await_count < 5
    await broadcaster.close_all()


@pytest.mark.asyncio
async def test_unserializable_message_is_not_sent():
    broadcaster = MessageBroadcaster()
    client = make_client()
    await broadcaster.register(client)

    await broadcaster.broadcast({"bad": object()})
    await asyncio.sleep(0.01)

    client.send.assert_not_awaited()
    await broadcaster.close_all()


@pytest.mark.asyncio
async def test_server_broadcasts_through_broadcaster(project):
    server = ProjectWebSocketServer()
    server.broadcaster = MagicMock()
    server.broadcaster.broadcast = AsyncMock()

    await server.broadcast_project(project, "/sets/Song.als")
    await server.broadcast_diff(project, [Change(ChangeKind.TRACK_ADDED, "1", "Vox")], "h")

    sent = [c.args[0] for c in server.broadcaster.broadcast.await_args_list]
    assert [m["type"] for m in sent] == ["PROJECT", "DIFF"]
    assert sent[1]["payload"]["project_path"] == "/sets/Song.als"
    assert not server.is_running()
