import gzip
import io
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from .events import ParseEvent, collapse_iterparse


def open_ableton_stream(path: Path) -> BinaryIO:
    """Open an Ableton .als (gzip) or plain .xml file as a binary stream."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix == ".als":
        return gzip.open(path, "rb")
    elif path.suffix == ".xml":
        return open(path, "rb")
    else:
        raise ValueError(f"Unsupported file type: {path.suffix}")


def iter_events(source: BinaryIO) -> Iterator[ParseEvent]:
    """Stream builder events from an open binary XML source."""
    raw = ET.iterparse(source, events=("start", "end"))
    yield from collapse_iterparse(raw)


def iter_ableton_events(path: Path) -> Iterator[ParseEvent]:
    """Stream builder events from an .als or .xml file, closing it when done."""
    with open_ableton_stream(path) as stream:
        yield from iter_events(stream)


def iter_events_from_string(xml_data: Union[str, bytes]) -> Iterator[ParseEvent]:
    """Stream builder events from an in-memory XML document."""
    if isinstance(xml_data, str):
        xml_data = xml_data.encode("utf-8")
    return iter_events(io.BytesIO(xml_data))
