"""Span validator.

Accepts or rejects one oracle-proposed span against the source text and
the requested category set.  Checks run in a fixed order and the first
failing check decides the rejection reason:

MISSING_FIELD          : value empty/absent, start/end absent, end <= start
OUT_OF_BOUNDS          : start < 0 or end > len(doc)
CATEGORY_NOT_REQUESTED : label unrecognized, or recognized but not requested
INDEX_MISMATCH         : exact and fuzzy checks both fail

Fuzzy recovery widens the window by ``padding`` characters on each side
(clamped to the document) and accepts the span if ``value`` occurs inside
it.  The span keeps the oracle's original offsets; the found offset is not
substituted.

Rejections are values, not exceptions.
"""
from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any

from pii_protector.catalog.category import Category
from pii_protector.engine.diagnostics import ValidationDiagnostics
from pii_protector.engine.normalizer import CategoryNormalizer
from pii_protector.engine.types import (
    CandidateSpan,
    Confidence,
    Rejected,
    RejectionReason,
    ValidatedSpan,
)

DEFAULT_PADDING = 2


def _as_offset(raw: Any) -> int | None:
    """Return *raw* as an int offset, or ``None`` if it is not integral."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def fuzzy_window(doc: str, start: int, end: int, padding: int) -> str:
    return doc[max(0, start - padding):min(len(doc), end + padding)]


def validate(
    candidate: CandidateSpan,
    doc: str,
    requested: Collection[Category],
    normalizer: CategoryNormalizer,
    *,
    padding: int = DEFAULT_PADDING,
    diagnostics: ValidationDiagnostics | None = None,
) -> ValidatedSpan | Rejected:
    """Validate *candidate* against *doc*; see module docstring for order."""

    def reject(reason: RejectionReason) -> Rejected:
        if diagnostics is not None:
            diagnostics.record_rejection(reason, candidate)
        return Rejected(reason)

    value = candidate.value
    start = _as_offset(candidate.start)
    end = _as_offset(candidate.end)
    if not isinstance(value, str) or not value or start is None or end is None or end <= start:
        return reject(RejectionReason.MISSING_FIELD)

    if start < 0 or end > len(doc):
        return reject(RejectionReason.OUT_OF_BOUNDS)

    category = normalizer.normalize(candidate.raw_category_label)
    if not isinstance(category, Category) or category not in requested:
        return reject(RejectionReason.CATEGORY_NOT_REQUESTED)

    fuzzy = False
    if doc[start:end] != value:
        if value not in fuzzy_window(doc, start, end, padding):
            return reject(RejectionReason.INDEX_MISMATCH)
        fuzzy = True
        if diagnostics is not None:
            diagnostics.record_fuzzy(candidate)

    return ValidatedSpan(
        category=category,
        value=value,
        start=start,
        end=end,
        confidence=Confidence.parse(candidate.confidence),
        fuzzy=fuzzy,
    )


def validate_all(
    candidates: Iterable[CandidateSpan],
    doc: str,
    requested: Collection[Category],
    normalizer: CategoryNormalizer,
    *,
    padding: int = DEFAULT_PADDING,
    diagnostics: ValidationDiagnostics | None = None,
) -> list[ValidatedSpan]:
    """Validate every candidate and return the accepted spans in input order."""
    accepted: list[ValidatedSpan] = []
    for candidate in candidates:
        result = validate(
            candidate,
            doc,
            requested,
            normalizer,
            padding=padding,
            diagnostics=diagnostics,
        )
        if isinstance(result, ValidatedSpan):
            accepted.append(result)
    return accepted
