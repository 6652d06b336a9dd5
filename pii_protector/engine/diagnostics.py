"""Rejection diagnostics channel.

The validator reports every rejected candidate here.  Counts are kept per
reason and each rejection is logged at DEBUG with offsets and lengths only.

Safety rule: candidate values are never logged.
"""
from __future__ import annotations

import logging
from collections import Counter

from pii_protector.engine.types import CandidateSpan, RejectionReason

logger = logging.getLogger(__name__)


class ValidationDiagnostics:
    """Per-scan rejection counter."""

    def __init__(self) -> None:
        self._counts: Counter[RejectionReason] = Counter()
        self.fuzzy_accepted = 0

    def record_rejection(self, reason: RejectionReason, candidate: CandidateSpan) -> None:
        self._counts[reason] += 1
        value_length = len(candidate.value) if isinstance(candidate.value, str) else None
        logger.debug(
            "Discarded oracle span (reason=%s, label=%r, start=%r, end=%r, value_length=%s)",
            reason.value,
            candidate.raw_category_label,
            candidate.start,
            candidate.end,
            value_length,
        )

    def record_fuzzy(self, candidate: CandidateSpan) -> None:
        self.fuzzy_accepted += 1
        logger.debug(
            "Accepted oracle span via fuzzy recovery (label=%r, start=%r, end=%r)",
            candidate.raw_category_label,
            candidate.start,
            candidate.end,
        )

    @property
    def rejected(self) -> int:
        return sum(self._counts.values())

    def counts(self) -> dict[str, int]:
        """Rejections per reason, in enum declaration order, zeros omitted."""
        return {r.value: self._counts[r] for r in RejectionReason if self._counts[r]}

    def log_summary(self, proposed: int) -> None:
        if self.rejected:
            logger.warning(
                "Oracle proposed %d spans; %d discarded %s",
                proposed,
                self.rejected,
                self.counts(),
            )
        else:
            logger.info("Oracle proposed %d spans; all accepted", proposed)
