"""Category value types.

A ``Category`` is always a member of some ``CategoryCatalog``.  Labels the
normalizer cannot map become ``Unrecognized`` and never reach a validated
span.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Category:
    """A canonical PII category identifier (e.g. ``EMAIL``)."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Unrecognized:
    """An oracle label that does not map to any catalog category."""

    raw_label: str

    def __str__(self) -> str:
        return f"Unrecognized({self.raw_label!r})"


NormalizedLabel = Union[Category, Unrecognized]
