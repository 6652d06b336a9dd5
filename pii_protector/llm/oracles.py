"""Oracle adapters: turn raw model output into engine inputs.

``detect_pii`` and ``infer_schema`` are the two per-scan oracle calls.
Transport failures propagate as ``OracleError``; a body that is merely
the wrong shape degrades gracefully (zero candidates, raw schema string).
"""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pii_protector.engine.types import CandidateSpan
from pii_protector.llm.client import OllamaClient, OracleError
from pii_protector.llm.prompts import DETECT_PII, EXPLAIN_PII, INFER_SCHEMA, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

EXPLANATION_FALLBACK = "Could not get explanation for this item."

_ENTITY_KEYS = ("entities", "piiEntities")


def _loads(text: str) -> Any:
    """Parse *text* as JSON, tolerating a surrounding markdown fence."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.strip("`")
        if stripped.lower().startswith("json"):
            stripped = stripped[4:]
    return json.loads(stripped)


def parse_candidates(raw: str) -> list[CandidateSpan]:
    """Extract candidate spans from a detection response body.

    Anything other than an object carrying an entity list yields no
    candidates; individual non-object entries are skipped.
    """
    try:
        data = _loads(raw)
    except ValueError:
        logger.warning("PII oracle returned non-JSON output; treating as zero candidates")
        return []

    entities = None
    if isinstance(data, dict):
        for key in _ENTITY_KEYS:
            if isinstance(data.get(key), list):
                entities = data[key]
                break
    if entities is None:
        logger.warning("PII oracle output has no entity list; treating as zero candidates")
        return []

    return [CandidateSpan.from_mapping(item) for item in entities if isinstance(item, dict)]


async def detect_pii(
    client: OllamaClient,
    text: str,
    categories: Sequence[str],
) -> list[CandidateSpan]:
    """Ask the oracle for spans of *categories* in *text*.

    An empty category list returns no candidates without calling the oracle.
    """
    if not categories:
        return []
    prompt = DETECT_PII.format(
        categories=", ".join(f"'{c}'" for c in categories),
        data=text,
    )
    raw = await client.generate(prompt, system=SYSTEM_PROMPT, use_case="detect_pii")
    return parse_candidates(raw)


# ---------------------------------------------------------------------------
# Schema inference
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaArtifact:
    """Schema returned by the oracle.

    ``parsed`` is ``None`` when the schema string was not valid JSON, in
    which case the raw string is passed through unchanged.
    """

    raw: str
    parsed: Any = None

    @property
    def is_json(self) -> bool:
        return self.parsed is not None

    @property
    def pretty(self) -> str:
        if self.parsed is None:
            return self.raw
        return json.dumps(self.parsed, indent=2, ensure_ascii=False)


def parse_schema(raw: str) -> SchemaArtifact:
    """Extract the schema artifact from an inference response body."""
    try:
        envelope = _loads(raw)
    except ValueError:
        logger.warning("Schema oracle returned non-JSON output; passing raw text through")
        return SchemaArtifact(raw=raw)

    if not isinstance(envelope, dict) or "schema" not in envelope:
        return SchemaArtifact(raw=raw, parsed=envelope)

    schema = envelope["schema"]
    if not isinstance(schema, str):
        return SchemaArtifact(raw=json.dumps(schema, ensure_ascii=False), parsed=schema)

    try:
        return SchemaArtifact(raw=schema, parsed=_loads(schema))
    except ValueError:
        logger.warning("Schema string is not valid JSON; passing raw text through")
        return SchemaArtifact(raw=schema)


async def infer_schema(client: OllamaClient, text: str) -> SchemaArtifact:
    """Ask the oracle for a per-field PII schema of *text*."""
    raw = await client.generate(
        INFER_SCHEMA.format(data=text),
        system=SYSTEM_PROMPT,
        use_case="infer_schema",
    )
    return parse_schema(raw)


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------


async def explain_value(client: OllamaClient, value: str) -> str:
    """Return a short explanation of why *value* may be PII.

    Never raises: oracle failures degrade to a fixed message.
    """
    try:
        raw = await client.generate(
            EXPLAIN_PII.format(text=value),
            system=SYSTEM_PROMPT,
            use_case="explain_pii",
        )
    except OracleError as exc:
        logger.warning("Explanation oracle call failed: %s", type(exc).__name__)
        return EXPLANATION_FALLBACK

    try:
        data = _loads(raw)
    except ValueError:
        return raw.strip() or EXPLANATION_FALLBACK
    if isinstance(data, dict) and isinstance(data.get("explanation"), str):
        return data["explanation"].strip() or EXPLANATION_FALLBACK
    return EXPLANATION_FALLBACK
