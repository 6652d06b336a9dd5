"""JSON exporter for scan output.

Two artifacts are produced per scan:

- the ``ScanResult`` (validated spans + per-category counts) as UTF-8 JSON,
- the inferred PII schema, pretty-printed with a 2-space indent when it is
  valid JSON and passed through verbatim otherwise.

Both are in-memory only; nothing is written to disk.
"""
from __future__ import annotations

import json
import re
from pathlib import PurePath
from typing import Any

from pii_protector.engine.types import ScanResult
from pii_protector.llm.oracles import SchemaArtifact

SCHEMA_SUFFIX = "_pii_schema.json"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w-]", re.ASCII)


def scan_result_to_dict(result: ScanResult) -> dict[str, Any]:
    return {
        "entities": [span.to_dict() for span in result.spans],
        "counts": {category.name: count for category, count in result.counts.items()},
    }


def scan_result_to_json(result: ScanResult) -> bytes:
    """Serialise *result* as UTF-8 JSON bytes."""
    return json.dumps(scan_result_to_dict(result), ensure_ascii=False).encode("utf-8")


def schema_to_json(schema: SchemaArtifact) -> bytes:
    """Pretty-printed schema document as UTF-8 bytes."""
    return schema.pretty.encode("utf-8")


def schema_filename(source_name: str | None = None) -> str:
    """Download name for the schema, e.g. ``customers.csv`` -> ``customers_pii_schema.json``."""
    stem = ""
    if source_name:
        stem = _UNSAFE_FILENAME_CHARS.sub("_", PurePath(source_name).name.split(".")[0])
        if not stem.strip("_"):
            stem = ""
    return f"{stem or 'schema'}{SCHEMA_SUFFIX}"
