"""
Structural anomaly tracking for the model builder.

Malformed input never crashes a parse on the first problem: the offending
event is skipped and the anomaly is recorded here, so callers can inspect
what was dropped and the builder can give up once a document is clearly
broken.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class AnomalyKind(Enum):
    MISSING_ID = "missing_id"
    NESTED_TRACK = "nested_track"
    ORPHAN_BRANCH = "orphan_branch"
    MISSING_VALUE = "missing_value"
    DUPLICATE_TRACK_ID = "duplicate_track_id"
    UNMATCHED_CLOSE = "unmatched_close"
    DETACHED_BRANCHES = "detached_branches"
    UNCLOSED_TRACK = "unclosed_track"
    UNCLOSED_BRANCHES = "unclosed_branches"


@dataclass(frozen=True)
class Anomaly:
    """
    One skipped or dropped piece of input.

    Attributes:
        kind: What went wrong
        element: Tag name of the element involved
        detail: Free-form context (track id, list size...)
    """
    kind: AnomalyKind
    element: str
    detail: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "element": self.element, "detail": self.detail}


@dataclass
class ParseDiagnostics:
    """Anomalies and event counts collected during one parse."""
    anomalies: List[Anomaly] = field(default_factory=list)
    events_processed: int = 0

    def record(self, kind: AnomalyKind, element: str, detail: str = "") -> Anomaly:
        anomaly = Anomaly(kind, element, detail)
        self.anomalies.append(anomaly)
        logger.warning(f"Skipped <{element}> ({kind.value}){': ' + detail if detail else ''}")
        return anomaly

    @property
    def count(self) -> int:
        return len(self.anomalies)

    def has(self, kind: AnomalyKind) -> bool:
        return any(a.kind is kind for a in self.anomalies)

    def count_by_kind(self) -> Dict[str, int]:
        return dict(Counter(a.kind.value for a in self.anomalies))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_processed": self.events_processed,
            "anomaly_count": self.count,
            "by_kind": self.count_by_kind(),
            "anomalies": [a.to_dict() for a in self.anomalies],
        }
