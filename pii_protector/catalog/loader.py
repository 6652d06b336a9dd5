"""Catalog YAML loader.

Loads the category list and correction table from a YAML document such
as ``config/categories.yaml``::

    categories: [EMAIL, NAME, SSN]
    corrections:
      EMAILS: EMAIL
      PERSON_NAME: NAME
    labels:
      EMAIL: [email, emails]
      SSN: SSN
"""
from __future__ import annotations

from pathlib import Path

import yaml

from pii_protector.catalog.catalog import CategoryCatalog


def load_catalog(path: str | Path) -> CategoryCatalog:
    """Load a ``CategoryCatalog`` from a YAML file.

    Raises
    ------
    ValueError
        If the document is not a mapping, the category list is missing or
        empty, or the correction or label table is not a mapping.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a YAML mapping, got {type(data).__name__}")

    categories = data.get("categories")
    if not isinstance(categories, list) or not categories:
        raise ValueError(f"{path}: 'categories' must be a non-empty list")

    corrections = data.get("corrections") or {}
    if not isinstance(corrections, dict):
        raise ValueError(f"{path}: 'corrections' must be a mapping")

    labels = data.get("labels") or {}
    if not isinstance(labels, dict):
        raise ValueError(f"{path}: 'labels' must be a mapping")

    try:
        return CategoryCatalog(categories, corrections, labels)
    except ValueError as exc:
        raise ValueError(f"{path}: {exc}") from exc
