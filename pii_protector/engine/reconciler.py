"""Span reconciler.

Turns a possibly overlapping set of validated spans into an ordered,
non-overlapping partition of the document into plain and annotated
segments.  Concatenating the segment texts always reproduces the
document exactly.

Overlap policy: the first-starting span wins and any span starting
before the end of the previously emitted annotation is dropped.  Spans
sharing a start are ordered by input position, so the span the oracle
proposed first wins the tie.
"""
from __future__ import annotations

from collections.abc import Sequence

from pii_protector.engine.types import (
    AnnotatedSegment,
    PlainSegment,
    RenderSegment,
    ValidatedSpan,
)


def _ordered(spans: Sequence[ValidatedSpan]) -> list[ValidatedSpan]:
    indexed = sorted(enumerate(spans), key=lambda pair: (pair[1].start, pair[0]))
    return [span for _, span in indexed]


def kept_spans(spans: Sequence[ValidatedSpan]) -> list[ValidatedSpan]:
    """Return the spans that survive the overlap policy, in document order."""
    kept: list[ValidatedSpan] = []
    last_index = 0
    for span in _ordered(spans):
        if span.start < last_index:
            continue
        kept.append(span)
        last_index = span.end
    return kept


def reconcile(spans: Sequence[ValidatedSpan], doc: str) -> list[RenderSegment]:
    """Partition *doc* into plain and annotated segments."""
    segments: list[RenderSegment] = []
    last_index = 0
    for span in kept_spans(spans):
        if span.start > last_index:
            segments.append(PlainSegment(doc[last_index:span.start]))
        segments.append(AnnotatedSegment(doc[span.start:span.end], span.category))
        last_index = span.end

    if last_index < len(doc):
        segments.append(PlainSegment(doc[last_index:]))
    return segments
