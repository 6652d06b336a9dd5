"""Category normalizer.

Maps a free-form oracle label onto a catalog category:

1. upper-case, trim, fold whitespace / hyphens to ``_``
2. strip a leading ``PII_`` prefix
3. apply the catalog's correction table (plurals, long forms, typos)
4. return the catalog member, or ``Unrecognized(raw_label)``

Total: never raises, whatever the oracle sends.
"""
from __future__ import annotations

from typing import Any

from pii_protector.catalog.catalog import CategoryCatalog, fold_label
from pii_protector.catalog.category import Category, NormalizedLabel, Unrecognized

_PREFIX = "PII_"


class CategoryNormalizer:
    """Normalizes oracle labels against one catalog."""

    def __init__(self, catalog: CategoryCatalog) -> None:
        self.catalog = catalog

    def normalize(self, raw_label: Any) -> NormalizedLabel:
        if not isinstance(raw_label, str):
            return Unrecognized("" if raw_label is None else str(raw_label))

        key = fold_label(raw_label)
        if key.startswith(_PREFIX):
            key = key[len(_PREFIX):]
        key = self.catalog.correct(key)

        if key in self.catalog:
            return self.catalog.get(key)
        return Unrecognized(raw_label)

    __call__ = normalize


def normalize(raw_label: Any, catalog: CategoryCatalog) -> NormalizedLabel:
    """Functional shortcut for ``CategoryNormalizer(catalog).normalize``."""
    return CategoryNormalizer(catalog).normalize(raw_label)


def is_recognized(label: NormalizedLabel) -> bool:
    return isinstance(label, Category)
