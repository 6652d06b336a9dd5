"""Prompt templates for the PII oracle.

Each template uses Python string ``.format()`` placeholders (literal braces
are doubled) and instructs the LLM to respond in structured JSON.  The
model output is never trusted: everything it returns is re-validated by
``pii_protector.engine``.

Use cases:
- Locate spans of the requested PII categories, with character offsets.
- Infer a per-column PII schema for structured input.
- Explain why a single value may be PII.
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
# System prompt shared by all oracle calls
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are a highly precise PII (Personally Identifiable Information) "
    "detection engine.  You ONLY output valid JSON.  No prose, no markdown "
    "fences, no commentary."
)

# ---------------------------------------------------------------------------
# DETECT_PII
# ---------------------------------------------------------------------------

DETECT_PII = (
    "Analyze the data below and return every instance of the requested PII "
    "categories.\n"
    "\n"
    "Rules:\n"
    "1. Scan ONLY for these categories: {categories}.  Ignore all other PII.\n"
    "2. The \"category\" of each entity MUST be exactly one of the categories "
    "above.  No plurals or variations.\n"
    "3. \"start\" and \"end\" are zero-based character offsets into the raw "
    "data: data[start:end] MUST equal \"value\".  Count every space, comma, "
    "quote and newline.\n"
    "4. Analyze the entire data, from the first character to the last.\n"
    "5. For JSON input, offsets refer to the raw JSON text and \"value\" "
    "excludes the surrounding quotes.\n"
    "6. \"confidence\" is one of \"high\", \"medium\", \"low\".\n"
    "\n"
    "Example input:\n"
    "name,email\\nAlice,alice@web.com\n"
    "Example output:\n"
    "{{\"entities\": ["
    "{{\"category\": \"NAME\", \"value\": \"Alice\", \"start\": 12, \"end\": 17, "
    "\"confidence\": \"high\"}}, "
    "{{\"category\": \"EMAIL\", \"value\": \"alice@web.com\", \"start\": 18, "
    "\"end\": 31, \"confidence\": \"high\"}}]}}\n"
    "\n"
    "Respond with a JSON object with a single key \"entities\" holding a list "
    "(empty if no PII is found).\n"
    "\n"
    "Data:\n"
    "```text\n"
    "{data}\n"
    "```"
)

# ---------------------------------------------------------------------------
# INFER_SCHEMA
# ---------------------------------------------------------------------------

INFER_SCHEMA = (
    "Given the following data, generate a JSON schema that identifies "
    "potential PII fields.  For each field include the column name, the "
    "detected PII type (e.g. PII_EMAIL, PII_NAME, PII_SSN) and a confidence "
    "level (high, medium, low).\n"
    "\n"
    "Example schema:\n"
    "[{{\"column\": \"email_address\", \"detected_type\": \"PII_EMAIL\", "
    "\"confidence\": \"high\"}}, "
    "{{\"column\": \"name\", \"detected_type\": \"PII_NAME\", "
    "\"confidence\": \"medium\"}}]\n"
    "\n"
    "Respond with a JSON object with a single key \"schema\" whose value is "
    "the schema encoded as a JSON string.\n"
    "\n"
    "Data:\n"
    "```text\n"
    "{data}\n"
    "```"
)

# ---------------------------------------------------------------------------
# EXPLAIN_PII
# ---------------------------------------------------------------------------

EXPLAIN_PII = (
    "Explain in one or two sentences why the following text might be "
    "considered Personally Identifiable Information.  Consider types such as "
    "name, email, phone number, address and government identifiers.\n"
    "\n"
    "Text: {text}\n"
    "\n"
    "Respond with a JSON object with a single key \"explanation\"."
)

# ---------------------------------------------------------------------------
# Template registry for programmatic access
# ---------------------------------------------------------------------------

PROMPT_TEMPLATES: dict[str, str] = {
    "detect_pii": DETECT_PII,
    "infer_schema": INFER_SCHEMA,
    "explain_pii": EXPLAIN_PII,
}
