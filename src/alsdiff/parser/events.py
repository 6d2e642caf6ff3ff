"""
Markup events consumed by the model builder.

The builder only needs four kinds of event: an element opening, a
self-closing element, an element closing and the end of the document.
ElementTree's iterparse reports every element as a start/end pair, so
`collapse_iterparse` folds a start immediately followed by its own end
into a single EMPTY event.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, Tuple
import xml.etree.ElementTree as ET


class EventKind(Enum):
    OPEN = "open"
    EMPTY = "empty"
    CLOSE = "close"
    END = "end"


@dataclass(frozen=True)
class ParseEvent:
    """A single markup event. `attributes` is empty for CLOSE and END."""
    kind: EventKind
    name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict, hash=False)


def collapse_iterparse(raw_events: Iterable[Tuple[str, ET.Element]]) -> Iterator[ParseEvent]:
    """
    Convert iterparse ("start", "end") pairs into builder events.

    `<Tag></Tag>` and `<Tag/>` both become EMPTY: ElementTree does not tell
    them apart, and neither form carries child elements. Elements are
    cleared once closed so a large set never sits in memory as a tree.

    Args:
        raw_events: Iterator from ET.iterparse(source, events=("start", "end"))

    Yields:
        ParseEvent values in document order, terminated by an END event
    """
    pending = None
    for event, elem in raw_events:
        if event == "start":
            if pending is not None:
                yield ParseEvent(EventKind.OPEN, pending[1], pending[2])
            # Attributes are complete at "start"; copy them before clear()
            pending = (elem, elem.tag, dict(elem.attrib))
            continue

        if pending is not None and pending[0] is elem:
            yield ParseEvent(EventKind.EMPTY, pending[1], pending[2])
        else:
            yield ParseEvent(EventKind.CLOSE, elem.tag)
        pending = None
        elem.clear()

    yield ParseEvent(EventKind.END)
