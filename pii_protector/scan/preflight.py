"""Preflight checks run before any oracle call.

A failing check raises ``PreflightError`` with a caller-facing message and
the scan stops without contacting the oracle.
"""
from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pii_protector.catalog.catalog import CategoryCatalog
from pii_protector.catalog.category import Category


class PreflightReason(str, Enum):
    EMPTY_INPUT = "empty_input"
    NO_CATEGORIES_SELECTED = "no_categories_selected"
    INPUT_TOO_LARGE = "input_too_large"
    UNKNOWN_CATEGORY = "unknown_category"


class PreflightError(ValueError):
    """Raised when a scan request is rejected before any oracle call."""

    def __init__(self, reason: PreflightReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def check_request(
    text: str,
    categories: Sequence[str] | None,
    catalog: CategoryCatalog,
    *,
    max_chars: int,
) -> list[Category]:
    """Validate a scan request and return the requested categories.

    ``categories=None`` selects the whole catalog.  The result is in catalog
    order.
    """
    if not text or not text.strip():
        raise PreflightError(
            PreflightReason.EMPTY_INPUT,
            "No data to scan. Please upload a file or paste data.",
        )
    if len(text) > max_chars:
        raise PreflightError(
            PreflightReason.INPUT_TOO_LARGE,
            f"Input exceeds the maximum of {max_chars} characters.",
        )
    if categories is None:
        return list(catalog)
    if not categories:
        raise PreflightError(
            PreflightReason.NO_CATEGORIES_SELECTED,
            "Please select at least one PII category to scan for.",
        )
    try:
        selected = catalog.select(categories)
    except KeyError as exc:
        raise PreflightError(PreflightReason.UNKNOWN_CATEGORY, str(exc.args[0])) from exc
    return catalog.ordered(selected)
