import json

import pytest

from alsdiff.errors import DuplicateTrackIdError
from alsdiff.model import (
    BranchNode,
    ModelVisitor,
    NodeHasher,
    NodeType,
    PrettyPrintVisitor,
    ProjectNode,
    SerializationVisitor,
    TrackNode,
    hash_tree,
    serialize_project,
)


@pytest.fixture
def project():
    kick = BranchNode(branch_type="DrumBranch", effective_name="Kick", user_name="808")
    kit = BranchNode(branch_type="InstrumentBranch", effective_name="Kit", branches=[kick])
    return ProjectNode(tracks=[
        TrackNode(track_type="MidiTrack", id="1", effective_name="Drums", branches=[kit]),
        TrackNode(track_type="AudioTrack", id="2", effective_name="Vox", user_name="Lead"),
    ])


def test_serialization_layout(project):
    """
    Test the snapshot layout, including omitted optional keys.
    """
    data = serialize_project(project)

    assert data == {
        "Tracks": [
            {
                "Type": "MidiTrack",
                "Id": "1",
                "EffectiveName": "Drums",
                "Branches": [
                    {
                        "Type": "InstrumentBranch",
                        "EffectiveName": "Kit",
                        "Branches": [
                            {"Type": "DrumBranch", "EffectiveName": "Kick", "UserName": "808"},
                        ],
                    },
                ],
            },
            {"Type": "AudioTrack", "Id": "2", "EffectiveName": "Vox", "UserName": "Lead"},
        ]
    }


def test_to_json_is_valid_json(project):
    text = SerializationVisitor().to_json(project)
    assert json.loads(text) == serialize_project(project)


def test_pretty_print(project):
    text = PrettyPrintVisitor().print(project)
    assert text.splitlines() == [
        "project (2 tracks)",
        "  MidiTrack [1] 'Drums'",
        "    InstrumentBranch 'Kit'",
        "      DrumBranch '808' (effective: 'Kick')",
        "  AudioTrack [2] 'Lead' (effective: 'Vox')",
    ]


def test_traverse_is_pre_order(project):
    nodes = ModelVisitor().traverse(project)
    assert [n.node_type for n in nodes] == [
        NodeType.PROJECT, NodeType.TRACK, NodeType.BRANCH, NodeType.BRANCH, NodeType.TRACK,
    ]


def test_traverse_handles_deep_racks():
    branch = BranchNode(branch_type="AudioEffectBranch")
    for _ in range(5000):
        branch = BranchNode(branch_type="AudioEffectBranch", branches=[branch])
    track = TrackNode(track_type="AudioTrack", id="1", branches=[branch])
    assert len(ModelVisitor().traverse(track)) == 5002


def test_display_name_prefers_user_name(project):
    assert project.tracks[0].display_name == "Drums"
    assert project.tracks[1].display_name == "Lead"


def test_find_track(project):
    assert project.find_track("2").effective_name == "Vox"
    assert project.find_track("99") is None


def test_track_map_rejects_duplicates():
    p = ProjectNode(tracks=[
        TrackNode(track_type="AudioTrack", id="1"),
        TrackNode(track_type="MidiTrack", id="1"),
    ])
    with pytest.raises(DuplicateTrackIdError):
        p.track_map()


def test_hash_is_stable(project):
    assert hash_tree(project) == hash_tree(project)
    assert len(hash_tree(project)) == 64


def test_hash_changes_with_nested_name(project):
    before = hash_tree(project)
    project.tracks[0].branches[0].branches[0].user_name = "909"
    assert hash_tree(project) != before


def test_hash_tells_missing_from_empty_chain():
    hasher = NodeHasher()
    without = TrackNode(track_type="AudioTrack", id="1")
    with_empty = TrackNode(track_type="AudioTrack", id="1", branches=[])
    assert hasher.hash_node(without) != hasher.hash_node(with_empty)


def test_hash_algorithm_is_configurable(project):
    assert len(hash_tree(project, algorithm="md5")) == 32
