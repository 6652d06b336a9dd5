"""ScanService: one scan = preflight, two concurrent oracle calls, engine.

PII detection and schema inference run as sibling tasks in an
``asyncio.TaskGroup`` under a single scan deadline.  If either task fails
the sibling is cancelled and the scan fails as a whole; the engine is
never run on partial oracle output.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from pii_protector.catalog.catalog import CategoryCatalog
from pii_protector.catalog.category import Category
from pii_protector.core.settings import Settings, get_settings
from pii_protector.engine.diagnostics import ValidationDiagnostics
from pii_protector.engine.normalizer import CategoryNormalizer
from pii_protector.engine.reconciler import reconcile
from pii_protector.engine.summary import summarize
from pii_protector.engine.types import CandidateSpan, RenderSegment, ScanResult
from pii_protector.engine.validator import DEFAULT_PADDING, validate_all
from pii_protector.llm.client import OllamaClient, OracleError
from pii_protector.llm.oracles import SchemaArtifact, detect_pii, infer_schema
from pii_protector.scan.preflight import check_request

logger = logging.getLogger(__name__)


class ScanFailedError(RuntimeError):
    """Raised when an oracle call fails; no partial result is produced."""


@dataclass(frozen=True)
class ScanReport:
    result: ScanResult
    segments: list[RenderSegment]
    schema: SchemaArtifact
    rejections: dict[str, int] = field(default_factory=dict)


def run_engine(
    text: str,
    candidates: Sequence[CandidateSpan],
    catalog: CategoryCatalog,
    requested: Collection[Category],
    *,
    padding: int = DEFAULT_PADDING,
    diagnostics: ValidationDiagnostics | None = None,
) -> ScanResult:
    """Validate *candidates* against *text* and aggregate the survivors.

    Oracle-free; an empty *requested* set yields an empty result.
    """
    if not requested:
        return ScanResult()
    accepted = validate_all(
        candidates,
        text,
        requested,
        CategoryNormalizer(catalog),
        padding=padding,
        diagnostics=diagnostics,
    )
    spans = tuple(sorted(accepted, key=lambda s: s.start))
    return ScanResult(spans=spans, counts=summarize(spans, catalog))


class ScanService:
    """Runs scans against one oracle client and one catalog."""

    def __init__(
        self,
        client: OllamaClient,
        catalog: CategoryCatalog,
        settings: Settings | None = None,
    ) -> None:
        self.client = client
        self.catalog = catalog
        self.settings = settings or get_settings()

    async def scan(self, text: str, categories: Sequence[str] | None = None) -> ScanReport:
        """Scan *text* for *categories* (``None`` = whole catalog).

        Raises
        ------
        PreflightError
            If the request is rejected before any oracle call.
        ScanFailedError
            If either oracle call fails or the scan deadline expires.
        """
        requested = check_request(
            text,
            categories,
            self.catalog,
            max_chars=self.settings.max_input_chars,
        )
        candidates, schema = await self._call_oracles(text, [c.name for c in requested])

        diagnostics = ValidationDiagnostics()
        result = run_engine(
            text,
            candidates,
            self.catalog,
            requested,
            padding=self.settings.fuzzy_padding,
            diagnostics=diagnostics,
        )
        diagnostics.log_summary(len(candidates))
        return ScanReport(
            result=result,
            segments=reconcile(result.spans, text),
            schema=schema,
            rejections=diagnostics.counts(),
        )

    async def _call_oracles(
        self,
        text: str,
        category_names: list[str],
    ) -> tuple[list[CandidateSpan], SchemaArtifact]:
        try:
            async with asyncio.timeout(self.settings.scan_timeout_s):
                async with asyncio.TaskGroup() as group:
                    detection = group.create_task(detect_pii(self.client, text, category_names))
                    schema = group.create_task(infer_schema(self.client, text))
        except TimeoutError as exc:
            logger.error("Scan exceeded %ds deadline", self.settings.scan_timeout_s)
            raise ScanFailedError(
                f"Scan timed out after {self.settings.scan_timeout_s}s"
            ) from exc
        except ExceptionGroup as group_exc:
            oracle_errors = group_exc.subgroup(OracleError)
            if oracle_errors is None:
                raise
            first = oracle_errors.exceptions[0]
            logger.error("Oracle call failed: %s", type(first).__name__)
            raise ScanFailedError(f"Failed to process data. {first}") from first
        return detection.result(), schema.result()
