import gzip
from pathlib import Path

import pytest


SAMPLE_SET = """<?xml version="1.0" encoding="UTF-8"?>
<Ableton MajorVersion="5" MinorVersion="11.0_433">
  <LiveSet>
    <Tracks>
      <MidiTrack Id="1">
        <Name>
          <EffectiveName Value="Piano" />
          <UserName Value="" />
        </Name>
        <DeviceChain>
          <Devices>
            <InstrumentGroupDevice Id="0">
              <UserName Value="Keys Rack" />
              <Branches>
                <InstrumentBranch Id="0">
                  <Name>
                    <EffectiveName Value="Grand" />
                    <UserName Value="" />
                  </Name>
                </InstrumentBranch>
              </Branches>
            </InstrumentGroupDevice>
          </Devices>
        </DeviceChain>
      </MidiTrack>
      <AudioTrack Id="2">
        <Name>
          <EffectiveName Value="Vocals" />
          <UserName Value="Lead Vox" />
        </Name>
      </AudioTrack>
      <ReturnTrack Id="3">
        <Name>
          <EffectiveName Value="A-Reverb" />
          <UserName Value="" />
        </Name>
      </ReturnTrack>
    </Tracks>
    <MasterTrack>
      <Name>
        <EffectiveName Value="Master" />
        <UserName Value="" />
      </Name>
    </MasterTrack>
  </LiveSet>
</Ableton>
"""

NESTED_SET = """<?xml version="1.0" encoding="UTF-8"?>
<Ableton>
  <LiveSet>
    <Tracks>
      <MidiTrack Id="7">
        <Name>
          <EffectiveName Value="Drums" />
        </Name>
        <Branches>
          <InstrumentBranch>
            <Name>
              <EffectiveName Value="L1" />
            </Name>
            <Branches>
              <DrumBranch>
                <Name>
                  <EffectiveName Value="L2" />
                </Name>
                <Branches>
                  <AudioEffectBranch>
                    <Name>
                      <EffectiveName Value="L3" />
                    </Name>
                  </AudioEffectBranch>
                </Branches>
              </DrumBranch>
            </Branches>
          </InstrumentBranch>
          <InstrumentBranch>
            <Name>
              <EffectiveName Value="Sibling" />
              <UserName Value="Second" />
            </Name>
          </InstrumentBranch>
        </Branches>
      </MidiTrack>
    </Tracks>
  </LiveSet>
</Ableton>
"""


def write_als(directory: Path, name: str, xml: str) -> Path:
    """Write an XML document as a gzip-compressed .als file."""
    path = Path(directory) / name
    with gzip.open(path, "wb") as f:
        f.write(xml.encode("utf-8"))
    return path


@pytest.fixture
def sample_xml():
    return SAMPLE_SET


@pytest.fixture
def nested_xml():
    return NESTED_SET


@pytest.fixture
def sample_als(tmp_path):
    return write_als(tmp_path, "Song.als", SAMPLE_SET)


@pytest.fixture
def als_writer(tmp_path):
    """Return a function writing (name, xml) to an .als file in tmp_path."""
    def _write(name, xml):
        return write_als(tmp_path, name, xml)
    return _write
