"""Tests for ScanService and the oracle-free run_engine pipeline."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from pii_protector.catalog.category import Category
from pii_protector.core.settings import Settings
from pii_protector.engine.types import AnnotatedSegment, CandidateSpan, PlainSegment, ScanResult
from pii_protector.llm.client import OllamaClient
from pii_protector.scan.preflight import PreflightError, PreflightReason
from pii_protector.scan.service import ScanFailedError, ScanService, run_engine

CSV_DOC = r"name,email\nAlice,alice@web.com"
CSV_ENTITIES = {
    "entities": [
        {"category": "NAME", "value": "Alice", "start": 12, "end": 17, "confidence": "high"},
        {"category": "EMAIL", "value": "alice@web.com", "start": 18, "end": 31, "confidence": "high"},
    ]
}


@pytest.fixture
def service(oracle_client, catalog) -> ScanService:
    return ScanService(oracle_client, catalog)


class TestEndToEnd:
    def test_csv_scenario(self, fake_ollama, service) -> None:
        fake_ollama.detection = json.dumps(CSV_ENTITIES)
        report = asyncio.run(service.scan(CSV_DOC, ["NAME", "EMAIL"]))

        assert [(s.value, s.start, s.end, s.fuzzy) for s in report.result.spans] == [
            ("Alice", 12, 17, False),
            ("alice@web.com", 18, 31, False),
        ]
        assert report.segments == [
            PlainSegment(r"name,email\n"),
            AnnotatedSegment("Alice", Category("NAME")),
            PlainSegment(","),
            AnnotatedSegment("alice@web.com", Category("EMAIL")),
        ]
        assert report.result.counts == {Category("NAME"): 1, Category("EMAIL"): 1}
        assert report.rejections == {}

    def test_both_oracles_called_once(self, fake_ollama, service) -> None:
        asyncio.run(service.scan(CSV_DOC, ["NAME"]))
        assert len(fake_ollama.prompts("Scan ONLY")) == 1
        assert len(fake_ollama.prompts("generate a JSON schema")) == 1

    def test_default_categories_are_whole_catalog(self, fake_ollama, service, catalog) -> None:
        asyncio.run(service.scan(CSV_DOC))
        (prompt,) = fake_ollama.prompts("Scan ONLY")
        for name in catalog.names:
            assert f"'{name}'" in prompt

    def test_allow_list_enforced(self, fake_ollama, service) -> None:
        fake_ollama.detection = json.dumps(CSV_ENTITIES)
        report = asyncio.run(service.scan(CSV_DOC, ["EMAIL"]))
        assert {s.category for s in report.result.spans} == {Category("EMAIL")}
        assert report.rejections == {"category_not_requested": 1}

    def test_bad_spans_absorbed(self, fake_ollama, service) -> None:
        fake_ollama.detection = json.dumps({"entities": [
            {"category": "NAME", "value": "Alice", "start": 12, "end": 17, "confidence": "high"},
            {"category": "NAME", "value": "Mallory", "start": 12, "end": 19},
            {"category": "EMAIL", "value": "alice@web.com", "start": 18, "end": 99},
            {"category": "CREDIT_CARD", "value": "Alice", "start": 12, "end": 17},
            "garbage",
        ]})
        report = asyncio.run(service.scan(CSV_DOC, ["NAME", "EMAIL"]))
        assert [s.value for s in report.result.spans] == ["Alice"]
        assert report.rejections == {
            "out_of_bounds": 1,
            "category_not_requested": 1,
            "index_mismatch": 1,
        }

    def test_malformed_detection_body_is_empty_result(self, fake_ollama, service) -> None:
        fake_ollama.detection = "Sorry, I can't help with that."
        report = asyncio.run(service.scan(CSV_DOC, ["NAME"]))
        assert report.result == ScanResult()
        assert report.segments == [PlainSegment(CSV_DOC)]

    def test_schema_parse_failure_passes_raw_string(self, fake_ollama, service) -> None:
        fake_ollama.schema = json.dumps({"schema": "name column looks like PII_NAME"})
        report = asyncio.run(service.scan(CSV_DOC, ["NAME"]))
        assert report.schema.is_json is False
        assert report.schema.pretty == "name column looks like PII_NAME"

    def test_spans_sorted_by_start(self, fake_ollama, service) -> None:
        fake_ollama.detection = json.dumps({"entities": list(reversed(CSV_ENTITIES["entities"]))})
        report = asyncio.run(service.scan(CSV_DOC, ["NAME", "EMAIL"]))
        assert [s.start for s in report.result.spans] == [12, 18]


class TestPreflight:
    @pytest.mark.parametrize(
        "text, categories, reason",
        [
            ("", ["NAME"], PreflightReason.EMPTY_INPUT),
            ("   \n", ["NAME"], PreflightReason.EMPTY_INPUT),
            ("Alice", [], PreflightReason.NO_CATEGORIES_SELECTED),
            ("Alice", ["NAME", "VIN"], PreflightReason.UNKNOWN_CATEGORY),
        ],
    )
    def test_rejected_without_oracle_call(self, fake_ollama, service, text, categories, reason) -> None:
        with pytest.raises(PreflightError) as excinfo:
            asyncio.run(service.scan(text, categories))
        assert excinfo.value.reason is reason
        assert fake_ollama.calls == []

    def test_input_too_large(self, fake_ollama, oracle_client, catalog) -> None:
        service = ScanService(oracle_client, catalog, Settings(MAX_INPUT_CHARS=10))
        with pytest.raises(PreflightError) as excinfo:
            asyncio.run(service.scan("x" * 11, ["NAME"]))
        assert excinfo.value.reason is PreflightReason.INPUT_TOO_LARGE
        assert fake_ollama.calls == []


class TestOracleFailure:
    def test_detection_failure_fails_scan(self, catalog) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "Scan ONLY" in json.loads(request.content)["prompt"]:
                return httpx.Response(500)
            return httpx.Response(200, json={"response": "[]"})

        service = ScanService(OllamaClient(transport=httpx.MockTransport(handler)), catalog)
        with pytest.raises(ScanFailedError, match="Failed to process data"):
            asyncio.run(service.scan(CSV_DOC, ["NAME"]))

    def test_schema_failure_fails_scan(self, catalog) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "JSON schema" in json.loads(request.content)["prompt"]:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"response": json.dumps(CSV_ENTITIES)})

        service = ScanService(OllamaClient(transport=httpx.MockTransport(handler)), catalog)
        with pytest.raises(ScanFailedError, match="Cannot connect"):
            asyncio.run(service.scan(CSV_DOC, ["NAME"]))

    def test_non_string_response_fails_scan(self, catalog) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"response": {"entities": []}})

        service = ScanService(OllamaClient(transport=httpx.MockTransport(handler)), catalog)
        with pytest.raises(ScanFailedError, match="non-string"):
            asyncio.run(service.scan("Alice", ["NAME"]))

    def test_scan_deadline(self, catalog) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"response": "{}"})

        service = ScanService(
            OllamaClient(transport=httpx.MockTransport(handler)),
            catalog,
            Settings(SCAN_TIMEOUT_S=1),
        )
        with pytest.raises(ScanFailedError, match="timed out"):
            asyncio.run(service.scan(CSV_DOC, ["NAME"]))


class TestRunEngine:
    def test_empty_requested_set_is_empty_result(self, catalog) -> None:
        candidates = [CandidateSpan("NAME", "Alice", 12, 17, "high")]
        assert run_engine(CSV_DOC, candidates, catalog, set()) == ScanResult()

    def test_no_unrecognized_category_ever_accepted(self, catalog) -> None:
        candidates = [
            CandidateSpan("XYZ_UNKNOWN", "Alice", 12, 17, "high"),
            CandidateSpan(None, "Alice", 12, 17, "high"),
            CandidateSpan("NAMES", "Alice", 12, 17, "high"),
        ]
        result = run_engine(CSV_DOC, candidates, catalog, set(catalog))
        assert [s.category for s in result.spans] == [Category("NAME")]

    def test_substring_identity(self, catalog) -> None:
        candidates = [
            CandidateSpan("NAME", "Alice", 12, 17, "high"),
            CandidateSpan("EMAIL", "alice@web.com", 17, 30, "low"),
        ]
        result = run_engine(CSV_DOC, candidates, catalog, set(catalog))
        for span in result.spans:
            if span.fuzzy:
                window = CSV_DOC[max(0, span.start - 2):span.end + 2]
                assert span.value in window
            else:
                assert CSV_DOC[span.start:span.end] == span.value
        assert [s.fuzzy for s in result.spans] == [False, True]
