"""Summary aggregator: per-category counts of accepted spans."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping

from pii_protector.catalog.catalog import CategoryCatalog
from pii_protector.catalog.category import Category
from pii_protector.engine.types import ValidatedSpan


def summarize(spans: Iterable[ValidatedSpan], catalog: CategoryCatalog) -> dict[Category, int]:
    """Count spans per category, in catalog order, omitting zero counts."""
    counter: Counter[Category] = Counter(span.category for span in spans)
    return {category: counter[category] for category in catalog if counter[category]}


def _phrase(category: Category, count: int, catalog: CategoryCatalog) -> str:
    return f"{count} {catalog.noun(category, count)}"


def describe(counts: Mapping[Category, int], catalog: CategoryCatalog) -> str:
    """Render counts as a sentence, e.g. ``"Detected 2 emails and 1 SSN."``.

    Nouns come from the catalog's display labels.
    """
    parts = [_phrase(category, count, catalog) for category, count in counts.items() if count]
    if not parts:
        return "No PII was detected for the selected categories."
    if len(parts) == 1:
        body = parts[0]
    elif len(parts) == 2:
        body = f"{parts[0]} and {parts[1]}"
    else:
        body = ", ".join(parts[:-1]) + f", and {parts[-1]}"
    return f"Detected {body}."
