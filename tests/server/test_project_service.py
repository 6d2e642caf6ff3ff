import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from alsdiff.diff import ChangeKind
from alsdiff.server.project_service import ProjectService
from alsdiff.snapshot import load_snapshot


SWAPPED_SET = """<Ableton><LiveSet><Tracks>
  <MidiTrack Id="1"><Name><EffectiveName Value="Organ" /><UserName Value="" /></Name>
    <Branches><InstrumentBranch><Name><EffectiveName Value="Grand" /></Name></InstrumentBranch></Branches>
  </MidiTrack>
  <AudioTrack Id="2"><Name><EffectiveName Value="Vocals" /><UserName Value="Lead Vox" /></Name></AudioTrack>
  <ReturnTrack Id="3"><Name><EffectiveName Value="A-Reverb" /><UserName Value="" /></Name></ReturnTrack>
</Tracks></LiveSet></Ableton>"""


@pytest.fixture
def websocket_server():
    server = MagicMock()
    server.is_running.return_value = True
    server.broadcast_project = AsyncMock()
    server.broadcast_diff = AsyncMock()
    server.broadcast_error = AsyncMock()
    return server


@pytest.fixture
def service(websocket_server):
    return ProjectService(websocket_server)


def test_first_load_has_no_changes(service, sample_als):
    result = service.load_project(sample_als)

    assert result["status"] == "success"
    assert result["first_load"] is True
    assert result["changes"] == []
    assert result["anomalies"] == 0
    assert len(service.current_project.tracks) == 3
    assert service.current_file == sample_als


def test_unchanged_reload_skips_diff(service, sample_als):
    first = service.load_project(sample_als)
    with patch("alsdiff.server.project_service.diff_projects") as mock_diff:
        second = service.load_project(sample_als)

    mock_diff.assert_not_called()
    assert second["root_hash"] == first["root_hash"]
    assert second["changes"] == []


def test_reload_reports_changes(service, sample_als, als_writer):
    service.load_project(sample_als)
    # Same file name, new content, as after a save in Live
    als_writer(sample_als.name, SWAPPED_SET)

    result = service.load_project(sample_als)

    assert [c.kind for c in result["changes"]] == [ChangeKind.INSTRUMENT_SWAPPED]
    assert result["summary"] == "Track 1: Swapped instrument Piano to Organ"


def test_snapshot_written_after_load(tmp_path, sample_als):
    snapshot_path = tmp_path / "state" / "latest.json"
    service = ProjectService(snapshot_path=snapshot_path)

    service.load_project(sample_als)

    assert load_snapshot(snapshot_path) == service.current_project


@pytest.mark.asyncio
async def test_first_reload_broadcasts_project(service, websocket_server, sample_als):
    await service.reload_and_broadcast(sample_als)

    websocket_server.broadcast_project.assert_awaited_once()
    websocket_server.broadcast_diff.assert_not_awaited()


@pytest.mark.asyncio
async def test_changed_reload_broadcasts_diff(service, websocket_server, sample_als, als_writer):
    await service.reload_and_broadcast(sample_als)
    als_writer(sample_als.name, SWAPPED_SET)

    result = await service.reload_and_broadcast(sample_als)

    websocket_server.broadcast_diff.assert_awaited_once_with(
        service.current_project, result["changes"], result["root_hash"]
    )


@pytest.mark.asyncio
async def test_failed_reload_broadcasts_error(service, websocket_server, tmp_path):
    result = await service.reload_and_broadcast(tmp_path / "gone.als")

    assert result is None
    websocket_server.broadcast_error.assert_awaited_once()
    assert websocket_server.broadcast_error.await_args.args[0] == "Reload failed"


@pytest.mark.asyncio
async def test_no_broadcast_without_server(sample_als):
    service = ProjectService()
    result = await service.reload_and_broadcast(sample_als)
    assert result["first_load"] is True
