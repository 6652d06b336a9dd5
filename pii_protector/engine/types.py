"""Engine data types.

``CandidateSpan`` is the oracle's untrusted proposal; every field may be
missing or of the wrong type.  ``ValidatedSpan`` is only ever created by
the validator and guarantees its offsets lie inside the source document.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pii_protector.catalog.category import Category


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> Confidence:
        """Map a free-form oracle confidence to the enum; unknown -> LOW."""
        if isinstance(raw, Confidence):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                return cls.LOW
        return cls.LOW


class RejectionReason(str, Enum):
    MISSING_FIELD = "missing_field"
    OUT_OF_BOUNDS = "out_of_bounds"
    CATEGORY_NOT_REQUESTED = "category_not_requested"
    INDEX_MISMATCH = "index_mismatch"


@dataclass(frozen=True)
class CandidateSpan:
    """Raw span proposal from the oracle."""

    raw_category_label: Any
    value: Any
    start: Any
    end: Any
    confidence: Any = None

    @classmethod
    def from_mapping(cls, item: dict[str, Any]) -> CandidateSpan:
        """Build a candidate from an oracle entity object.

        Both ``category`` and ``type`` are accepted as the label key.
        """
        label = item.get("category")
        if label is None:
            label = item.get("type")
        return cls(
            raw_category_label=label,
            value=item.get("value"),
            start=item.get("start"),
            end=item.get("end"),
            confidence=item.get("confidence"),
        )


@dataclass(frozen=True)
class ValidatedSpan:
    category: Category
    value: str
    start: int
    end: int
    confidence: Confidence
    fuzzy: bool = False  # accepted via padded-window recovery

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.name,
            "value": self.value,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence.value,
            "fuzzy": self.fuzzy,
        }


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason


@dataclass(frozen=True)
class PlainSegment:
    text: str


@dataclass(frozen=True)
class AnnotatedSegment:
    text: str
    category: Category


RenderSegment = Union[PlainSegment, AnnotatedSegment]


def segment_to_dict(segment: RenderSegment) -> dict[str, Any]:
    if isinstance(segment, AnnotatedSegment):
        return {"kind": "annotated", "text": segment.text, "category": segment.category.name}
    return {"kind": "plain", "text": segment.text}


@dataclass(frozen=True)
class ScanResult:
    """Validated spans sorted by start, plus per-category counts."""

    spans: tuple[ValidatedSpan, ...] = ()
    counts: dict[Category, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.spans)
